"""Compliance alert triggers: daily job on demand, and a forced alert for the current user."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry
from staywatch.models.user import User
from staywatch.services.alerts import check_and_alert_user, default_dispatcher, run_daily_alerts
from staywatch.services.rule_registry import RuleRegistry

router = APIRouter(prefix="/notifications", tags=["notifications"])
settings = get_settings()


@router.post("/run-alerts")
def trigger_daily_alerts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """Manually run the daily alert job. Sends emails to users approaching their limit."""
    sent = run_daily_alerts(db=db, registry=registry)
    return {"status": "ok", "message": "Alert job completed.", "sent": sent}


@router.post("/test-alert")
def send_test_alert(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """
    Send the current user their compliance alert now, ignoring level and repeat window.
    Requires MAILGUN_API_KEY and MAILGUN_DOMAIN in .env.
    """
    if not settings.mailgun_api_key or not settings.mailgun_domain:
        raise HTTPException(
            status_code=503,
            detail="Mailgun is not configured. Set MAILGUN_API_KEY and MAILGUN_DOMAIN in .env.",
        )
    entry = check_and_alert_user(db, current_user, registry, default_dispatcher(), force=True)
    if entry is None:
        raise HTTPException(status_code=404, detail="Primary jurisdiction has no active rule.")
    if not entry.delivered:
        raise HTTPException(status_code=502, detail="Mailgun request failed. Check server logs and MAILGUN_* settings.")
    return {"status": "ok", "message": f"Test alert sent to {current_user.email}.", "level": entry.level}
