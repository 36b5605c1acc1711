"""StayWatch – travel-day compliance service."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from staywatch.config import get_settings
from staywatch.database import SessionLocal
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from staywatch.models import (  # noqa: F401
    User, FamilyMember, TripRecord, JurisdictionRule,
    TrackedJurisdiction, ComplianceSnapshot, AlertLog,
)
from staywatch.routers import analytics, family, jurisdictions, notifications, preferences, simulation, trips
from staywatch.seed import init_rules
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader

log = logging.getLogger("uvicorn.error")

settings = get_settings()
app = FastAPI(title=settings.app_name, debug=settings.debug)
app.state.rule_registry = RuleRegistry(db_rule_loader(SessionLocal))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(jurisdictions.router)
app.include_router(trips.router)
app.include_router(simulation.router)
app.include_router(family.router)
app.include_router(analytics.router)
app.include_router(notifications.router)
app.include_router(preferences.router)


@app.on_event("startup")
def startup():
    if settings.mailgun_api_key and settings.mailgun_domain:
        log.info("[Mailgun] Alerts using domain=%s from=%s", settings.mailgun_domain, settings.mailgun_from_email)
    else:
        log.info("[Mailgun] Not configured - compliance alert emails will be skipped")
    try:
        added = init_rules(SessionLocal, app.state.rule_registry)
        if added:
            log.info("Seeded %d jurisdiction rule(s)", added)
    except SQLAlchemyError as e:
        log.warning("Database startup failed (tables/seed skipped). Check DATABASE_URL and network. Error: %s", e)

    if settings.alerts_cron_enabled or settings.snapshot_cron_enabled:
        from apscheduler.schedulers.background import BackgroundScheduler
        from staywatch.services.alerts import run_daily_alerts
        from staywatch.services.snapshots import run_snapshot_job

        scheduler = BackgroundScheduler(timezone="UTC")
        if settings.alerts_cron_enabled:
            scheduler.add_job(run_daily_alerts, "cron", hour=settings.alerts_cron_hour, minute=0)
        if settings.snapshot_cron_enabled:
            scheduler.add_job(run_snapshot_job, "cron", hour=settings.snapshot_cron_hour, minute=0)
        scheduler.start()
        app.state.scheduler = scheduler


@app.on_event("shutdown")
def shutdown():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
