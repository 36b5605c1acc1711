"""Seed the default jurisdiction rules (zones, visitor visas, state residency, UK tax year)."""
from typing import Callable

from sqlalchemy.orm import Session
from staywatch.database import Base
from staywatch.models import JurisdictionRule
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.rules import DEFAULT_RULES, rule_from_record


def seed_jurisdiction_rules(db: Session) -> int:
    """Insert default rules missing from the table. Returns how many were added."""
    existing = {code for (code,) in db.query(JurisdictionRule.code).all()}
    added = 0
    for order, definition in enumerate(DEFAULT_RULES):
        if definition["code"] in existing:
            continue
        rule = rule_from_record(definition)
        db.add(
            JurisdictionRule(
                code=rule.code,
                name=rule.name,
                type=rule.type,
                days_allowed=rule.days_allowed,
                window_days=rule.window_days,
                counting_method=rule.counting_method,
                reset_month=definition.get("reset_month"),
                reset_day=definition.get("reset_day"),
                description=rule.description,
                is_active=True,
                is_system=True,
                display_order=order,
            )
        )
        added += 1
    db.commit()
    return added


def init_rules(session_factory: Callable[[], Session], registry: RuleRegistry) -> int:
    """Create tables, seed missing defaults and load the registry. A bad rule row raises ConfigurationError here."""
    db = session_factory()
    try:
        Base.metadata.create_all(bind=db.get_bind())
        added = seed_jurisdiction_rules(db)
    finally:
        db.close()
    registry.invalidate()
    registry.all()
    return added
