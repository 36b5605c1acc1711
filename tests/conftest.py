"""
Pytest configuration and shared fixtures for StayWatch tests.

- Engine tests (interval math, rules, compliance, simulator) need no database.
- Service and API tests run against an in-memory SQLite database (StaticPool) seeded
  with the default jurisdiction rules; the API uses it through a get_db override.
"""
import os

# Must be set before staywatch.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PRIMARY_JURISDICTION_CODE"] = "schengen"
os.environ["ALERTS_CRON_ENABLED"] = "false"
os.environ["SNAPSHOT_CRON_ENABLED"] = "false"
os.environ["MAILGUN_API_KEY"] = ""
os.environ["MAILGUN_DOMAIN"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from staywatch.database import Base, get_db
from staywatch.main import app
from staywatch.models import FamilyMember, User
from staywatch.seed import seed_jurisdiction_rules
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader
from staywatch.services.rules import Rule


@pytest.fixture
def schengen() -> Rule:
    return Rule("schengen", 90, 180, name="Schengen Area")


@pytest.fixture
def us_ny() -> Rule:
    return Rule("us_ny", 183, 365, "calendar_year", name="New York State residency", type="state")


@pytest.fixture
def registry() -> RuleRegistry:
    """Registry over the built-in default rules (no database)."""
    return RuleRegistry()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_jurisdiction_rules(db)
    finally:
        db.close()
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db) -> User:
    u = User(email="traveler@example.com", full_name="Test Traveler", email_alerts=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def other_user(db) -> User:
    u = User(email="someone@example.com", full_name="Someone Else")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def member(db, user) -> FamilyMember:
    m = FamilyMember(user_id=user.id, name="Sam", relationship_to_user="child")
    db.add(m)
    db.commit()
    db.refresh(m)
    return m


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    previous_registry = app.state.rule_registry
    app.state.rule_registry = RuleRegistry(db_rule_loader(session_factory))
    # Not used as a context manager: startup (create_all on the real engine, scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.rule_registry = previous_registry


@pytest.fixture
def auth_headers(user) -> dict:
    return {"X-User-Id": str(user.id)}
