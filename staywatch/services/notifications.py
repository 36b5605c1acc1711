"""Email delivery (Mailgun) and the compliance alert templates."""
import logging

import httpx

from staywatch.config import get_settings

log = logging.getLogger("uvicorn.error")

MAILGUN_US_BASE = "https://api.mailgun.net"
MAILGUN_EU_BASE = "https://api.eu.mailgun.net"


def send_email(to_email: str, subject: str, html_content: str, text_content: str | None = None) -> bool:
    """Send email via Mailgun. Returns False (and logs) when unconfigured or the API rejects the message."""
    settings = get_settings()
    if not (settings.mailgun_api_key and settings.mailgun_domain):
        log.warning("Email NOT SENT to=%s subject=%s: MAILGUN_API_KEY / MAILGUN_DOMAIN not set", to_email, subject)
        return False

    base = (settings.mailgun_base_url or MAILGUN_US_BASE).rstrip("/")
    domain = settings.mailgun_domain.lower()
    from_addr = settings.mailgun_from_email
    if "@" not in from_addr or from_addr.split("@")[-1].lower() != domain:
        # Mailgun only delivers when the sender matches the sending domain
        from_addr = f"noreply@{domain}"
    data = {
        "from": f"{settings.mailgun_from_name} <{from_addr}>",
        "to": to_email,
        "subject": subject,
        "text": text_content or "",
        "html": html_content or "",
    }
    try:
        with httpx.Client(timeout=10.0) as client:
            r = client.post(f"{base}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data)
            if r.status_code == 401 and base == MAILGUN_US_BASE:
                log.info("Mailgun 401 with US endpoint, retrying with EU endpoint")
                r = client.post(
                    f"{MAILGUN_EU_BASE}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data
                )
    except httpx.HTTPError as e:
        log.warning("Mailgun request failed to=%s: %s: %s", to_email, type(e).__name__, e)
        return False
    if 200 <= r.status_code < 300:
        log.info("Mailgun accepted email to=%s subject=%s", to_email, subject)
        return True
    log.warning("Mailgun rejected email to=%s status=%s body=%s", to_email, r.status_code, r.text[:500])
    return False


_HEADINGS = {
    "urgent": "Urgent: you are at or near your limit",
    "danger": "You are getting close to your limit",
    "warning": "Heads up: you have used most of your allowance",
}


def compliance_alert_subject(level: str, jurisdiction_name: str, days_remaining: int) -> str:
    if level == "urgent":
        return f"[StayWatch] Urgent: only {days_remaining} days left in {jurisdiction_name}"
    if level == "danger":
        return f"[StayWatch] {jurisdiction_name}: {days_remaining} days remaining"
    return f"[StayWatch] {jurisdiction_name} travel reminder"


def send_compliance_alert(
    to_email: str,
    *,
    level: str,
    recipient_name: str,
    jurisdiction_name: str,
    days_used: int,
    days_allowed: int,
    days_remaining: int,
    window_start: str,
    window_end: str,
    next_expiring_date: str | None = None,
) -> bool:
    """Alert email for a status that crossed an alert level."""
    subject = compliance_alert_subject(level, jurisdiction_name, days_remaining)
    if level == "urgent":
        message = (
            f"You have only {days_remaining} days remaining in {jurisdiction_name}. "
            "Any additional travel may result in overstaying your allowed time."
        )
    elif level == "danger":
        message = (
            f"You have used {days_used} of your {days_allowed} allowed days in {jurisdiction_name}. "
            "Please plan any further travel carefully."
        )
    else:
        message = (
            f"You have used {days_used} of your {days_allowed} allowed days in {jurisdiction_name}. "
            "This is a friendly reminder to help you plan your travel."
        )
    expiry_line = f"Your earliest counted day drops out of the window on {next_expiring_date}." if next_expiring_date else ""
    html = f"""
    <p>Hello {recipient_name},</p>
    <h2>{_HEADINGS.get(level, _HEADINGS["warning"])}</h2>
    <p>{message}</p>
    <p>Counting window: {window_start} to {window_end}.</p>
    <p>{expiry_line}</p>
    <p>— StayWatch</p>
    """
    text = f"{message}\nCounting window: {window_start} to {window_end}.\n{expiry_line}".strip()
    return send_email(to_email, subject, html, text_content=text)
