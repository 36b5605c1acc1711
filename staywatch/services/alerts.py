"""Compliance alerts: decide when a summary warrants an alert and publish it to subscribers.

The calculator never sends anything. The daily job computes summaries, asks
should_alert() whether the level is new (or the last one is stale), and hands the
event to every subscriber of the dispatcher. Email is one subscriber.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from staywatch.config import get_settings
from staywatch.database import SessionLocal
from staywatch.models.alert_log import AlertLog
from staywatch.models.user import User
from staywatch.services.compliance import ComplianceStatus, Summary, calculate
from staywatch.services.notifications import send_compliance_alert
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader
from staywatch.services.trip_store import load_trips

log = logging.getLogger("uvicorn.error")

LEVEL_WARNING = "warning"
LEVEL_DANGER = "danger"
LEVEL_URGENT = "urgent"

_LEVEL_BY_STATUS = {
    ComplianceStatus.warning: LEVEL_WARNING,
    ComplianceStatus.danger: LEVEL_DANGER,
    ComplianceStatus.critical: LEVEL_URGENT,
    ComplianceStatus.exceeded: LEVEL_URGENT,
}


@dataclass(frozen=True)
class AlertEvent:
    user_id: int
    email: str
    recipient_name: str
    level: str
    jurisdiction_name: str
    summary: Summary


Subscriber = Callable[[AlertEvent], bool]


def alert_level(summary: Summary) -> Optional[str]:
    """None while the traveler is in the safe band."""
    return _LEVEL_BY_STATUS.get(summary.status)


def should_alert(
    level: Optional[str],
    last_level: Optional[str],
    last_sent_at: Optional[datetime],
    now: datetime,
    repeat_days: int = 7,
) -> bool:
    """A new level always alerts; the same level alerts again only after repeat_days."""
    if level is None:
        return False
    if level != last_level or last_sent_at is None:
        return True
    if last_sent_at.tzinfo is None:
        last_sent_at = last_sent_at.replace(tzinfo=timezone.utc)
    return now - last_sent_at >= timedelta(days=repeat_days)


class AlertDispatcher:
    """Observer registry. publish() returns True when at least one subscriber delivered the alert."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.remove(subscriber)

    def publish(self, event: AlertEvent) -> bool:
        delivered = False
        for subscriber in list(self._subscribers):
            try:
                delivered = bool(subscriber(event)) or delivered
            except Exception:
                log.exception("Alert subscriber %r failed for user %s", subscriber, event.user_id)
        return delivered


def email_subscriber(event: AlertEvent) -> bool:
    s = event.summary
    return send_compliance_alert(
        event.email,
        level=event.level,
        recipient_name=event.recipient_name,
        jurisdiction_name=event.jurisdiction_name,
        days_used=s.days_used,
        days_allowed=s.days_allowed,
        days_remaining=s.days_remaining,
        window_start=s.window_start.isoformat(),
        window_end=s.window_end.isoformat(),
        next_expiring_date=s.next_expiring_date.isoformat() if s.next_expiring_date else None,
    )


def default_dispatcher() -> AlertDispatcher:
    dispatcher = AlertDispatcher()
    dispatcher.subscribe(email_subscriber)
    return dispatcher


def last_alert(db: Session, user_id: int, code: str) -> Optional[AlertLog]:
    return (
        db.query(AlertLog)
        .filter(AlertLog.user_id == user_id, AlertLog.jurisdiction_code == code, AlertLog.delivered == 1)
        .order_by(AlertLog.created_at.desc(), AlertLog.id.desc())
        .first()
    )


def check_and_alert_user(
    db: Session,
    user: User,
    registry: RuleRegistry,
    dispatcher: AlertDispatcher,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    force: bool = False,
) -> Optional[AlertLog]:
    """Alert one user on their primary jurisdiction. Returns the AlertLog written, or None when nothing was due."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    today = today or now.date()
    code = settings.primary_jurisdiction_code
    rule = registry.get(code)
    if rule is None:
        log.warning("Primary jurisdiction %s has no active rule; alerts skipped", code)
        return None

    summary = calculate(rule, load_trips(db, user.id), today, code)
    level = alert_level(summary)
    if force and level is None:
        level = LEVEL_WARNING
    previous = last_alert(db, user.id, code)
    if not force and not should_alert(
        level,
        previous.level if previous else None,
        previous.created_at if previous else None,
        now,
        settings.alert_repeat_days,
    ):
        return None

    event = AlertEvent(
        user_id=user.id,
        email=user.email,
        recipient_name=user.full_name or user.email,
        level=level,
        jurisdiction_name=rule.name or rule.code,
        summary=summary,
    )
    delivered = dispatcher.publish(event)
    entry = AlertLog(
        user_id=user.id,
        jurisdiction_code=code,
        level=level,
        days_used=summary.days_used,
        days_remaining=summary.days_remaining,
        delivered=1 if delivered else 0,
        message=f"{level} alert for {code}: {summary.days_used}/{summary.days_allowed} days used.",
        meta={"status": summary.status.value, "window_start": summary.window_start.isoformat(), "forced": force},
        created_at=now,
    )
    db.add(entry)
    db.commit()
    return entry


def run_daily_alerts(
    db: Session | None = None,
    registry: RuleRegistry | None = None,
    dispatcher: AlertDispatcher | None = None,
    today: Optional[date] = None,
) -> int:
    """Check every user with email alerts on. Returns how many alerts were delivered."""
    own_session = db is None
    db = db or SessionLocal()
    registry = registry or RuleRegistry(db_rule_loader(SessionLocal))
    dispatcher = dispatcher or default_dispatcher()
    sent = 0
    try:
        users = db.query(User).filter(User.email_alerts.is_(True)).all()
        for user in users:
            entry = check_and_alert_user(db, user, registry, dispatcher, today=today)
            if entry is not None and entry.delivered:
                sent += 1
        log.info("Daily alerts: checked %d user(s), delivered %d alert(s)", len(users), sent)
        return sent
    finally:
        if own_session:
            db.close()
