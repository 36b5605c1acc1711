"""Read-through cache of jurisdiction rules, owned by whoever builds it (app startup, jobs, tests)."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from staywatch.models.jurisdiction_rule import JurisdictionRule
from staywatch.services.rules import DEFAULT_RULES, JurisdictionType, Rule, rule_from_record

RuleLoader = Callable[[], Iterable[Any]]


def default_rule_loader() -> Iterable[dict[str, Any]]:
    return DEFAULT_RULES


def db_rule_loader(session_factory: Callable[[], Session]) -> RuleLoader:
    """Loader reading active rows from jurisdiction_rules, ordered for display."""

    def load() -> List[JurisdictionRule]:
        db = session_factory()
        try:
            return (
                db.query(JurisdictionRule)
                .filter(JurisdictionRule.is_active.is_(True))
                .order_by(JurisdictionRule.display_order.asc(), JurisdictionRule.name.asc())
                .all()
            )
        finally:
            db.close()

    return load


class RuleRegistry:
    """Rules keyed by code. Everything is loaded and validated on first use; a bad rule raises ConfigurationError."""

    def __init__(self, loader: RuleLoader = default_rule_loader):
        self._loader = loader
        self._lock = threading.Lock()
        self._rules: Optional[Dict[str, Rule]] = None

    def _load(self) -> Dict[str, Rule]:
        with self._lock:
            if self._rules is None:
                rules: Dict[str, Rule] = {}
                for record in self._loader():
                    rule = rule_from_record(record)
                    rules[rule.code] = rule
                self._rules = rules
                logging.getLogger("uvicorn.error").info("Loaded %d jurisdiction rule(s)", len(rules))
            return self._rules

    def get(self, code: str | None) -> Optional[Rule]:
        if not code:
            return None
        return self._load().get(code.strip().lower())

    def all(self, type: JurisdictionType | str | None = None) -> List[Rule]:
        rules = list(self._load().values())
        if type:
            wanted = JurisdictionType(type)
            rules = [r for r in rules if r.type == wanted]
        return rules

    def __contains__(self, code: str) -> bool:
        return self.get(code) is not None

    def invalidate(self) -> None:
        with self._lock:
            self._rules = None
