"""Per-user preferences."""
from pydantic import BaseModel


class UserSettingsUpdate(BaseModel):
    full_name: str | None = None
    email_alerts: bool | None = None


class UserSettingsResponse(BaseModel):
    email: str
    full_name: str | None
    email_alerts: bool
    primary_jurisdiction_code: str
    alert_repeat_days: int
