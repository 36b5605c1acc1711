"""Shared dependencies: DB session, current user, rule registry."""
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.models.user import User
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.rules import Rule


def get_current_user(
    db: Session = Depends(get_db),
    x_user_id: str | None = Header(None),
) -> User:
    """Caller identity is asserted by the gateway in front of this service via X-User-Id."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        user_id = int(x_user_id.strip())
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_rule_registry(request: Request) -> RuleRegistry:
    return request.app.state.rule_registry


def resolve_rule(code: str | None, registry: RuleRegistry) -> Rule:
    """Rule for code (primary zone when empty) or 404."""
    code = (code or get_settings().primary_jurisdiction_code).strip().lower()
    rule = registry.get(code)
    if not rule:
        raise HTTPException(status_code=404, detail=f"Jurisdiction not found: {code}")
    return rule
