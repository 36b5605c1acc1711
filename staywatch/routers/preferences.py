"""Per-user settings: alert opt-in and display name."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user
from staywatch.models.user import User
from staywatch.schemas.user import UserSettingsResponse, UserSettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])
settings = get_settings()


def _to_response(user: User) -> UserSettingsResponse:
    return UserSettingsResponse(
        email=user.email,
        full_name=user.full_name,
        email_alerts=bool(user.email_alerts),
        primary_jurisdiction_code=settings.primary_jurisdiction_code,
        alert_repeat_days=settings.alert_repeat_days,
    )


@router.get("/", response_model=UserSettingsResponse)
def get_user_settings(current_user: User = Depends(get_current_user)):
    return _to_response(current_user)


@router.put("/", response_model=UserSettingsResponse)
def update_user_settings(
    data: UserSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Turn daily compliance alert emails on or off. Omitted or null fields are left unchanged."""
    if data.email_alerts is not None:
        current_user.email_alerts = data.email_alerts
    if "full_name" in data.model_fields_set:
        current_user.full_name = (data.full_name or "").strip() or None
    db.commit()
    db.refresh(current_user)
    return _to_response(current_user)
