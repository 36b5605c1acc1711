"""Jurisdiction rule definitions: counting method, limits and the annual reset anchor."""
from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass
from typing import Any, Mapping

from staywatch.exceptions import ConfigurationError


class CountingMethod(str, enum.Enum):
    rolling = "rolling"
    calendar_year = "calendar_year"
    fiscal_year = "fiscal_year"


class JurisdictionType(str, enum.Enum):
    zone = "zone"
    country = "country"
    state = "state"


@dataclass(frozen=True)
class Rule:
    """One jurisdiction's compliance definition. Invalid combinations raise ConfigurationError."""

    code: str
    days_allowed: int
    window_days: int
    counting_method: CountingMethod = CountingMethod.rolling
    reset_month: int = 1
    reset_day: int = 1
    name: str = ""
    type: JurisdictionType = JurisdictionType.zone
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.code:
            raise ConfigurationError("Rule code is required")
        try:
            method = CountingMethod(self.counting_method)
        except ValueError:
            raise ConfigurationError(f"Unknown counting method {self.counting_method!r} for rule {self.code}")
        object.__setattr__(self, "counting_method", method)
        if self.days_allowed <= 0:
            raise ConfigurationError(f"Rule {self.code}: days_allowed must be positive, got {self.days_allowed}")
        if method == CountingMethod.rolling and self.window_days <= 0:
            raise ConfigurationError(f"Rule {self.code}: window_days must be positive, got {self.window_days}")
        if not 1 <= self.reset_month <= 12:
            raise ConfigurationError(f"Rule {self.code}: reset_month must be 1-12, got {self.reset_month}")
        # Leap year month lengths; Feb 29 anchors fall back to Feb 28 in other years
        _, last_day = calendar.monthrange(2000, self.reset_month)
        if not 1 <= self.reset_day <= last_day:
            raise ConfigurationError(
                f"Rule {self.code}: reset_day {self.reset_day} is not a valid day of month {self.reset_month}"
            )

    @property
    def is_rolling(self) -> bool:
        return self.counting_method == CountingMethod.rolling


def rule_from_record(record: Any) -> Rule:
    """Build a Rule from a mapping or an ORM row (JurisdictionRule). Missing reset anchor means Jan 1."""
    if isinstance(record, Mapping):
        get = record.get
    else:
        def get(key, default=None):
            return getattr(record, key, default)

    def anchor(key):
        value = get(key)
        return 1 if value is None else int(value)

    try:
        return Rule(
            code=(get("code") or "").strip().lower(),
            days_allowed=int(get("days_allowed") or 0),
            window_days=int(get("window_days") or 0),
            counting_method=get("counting_method") or CountingMethod.rolling,
            reset_month=anchor("reset_month"),
            reset_day=anchor("reset_day"),
            name=get("name") or "",
            type=JurisdictionType(get("type") or JurisdictionType.zone),
            description=get("description"),
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid rule record {get('code')!r}: {e}") from e


# Seeded defaults (jurisdiction_rules table on first startup)
DEFAULT_RULES: list[dict[str, Any]] = [
    {
        "code": "schengen",
        "name": "Schengen Area",
        "type": "zone",
        "days_allowed": 90,
        "window_days": 180,
        "counting_method": "rolling",
        "description": "90 days in any 180-day period across all Schengen member states.",
    },
    {
        "code": "uk_visitor",
        "name": "United Kingdom (Standard Visitor)",
        "type": "country",
        "days_allowed": 180,
        "window_days": 365,
        "counting_method": "rolling",
        "description": "Visitors may stay up to 6 months per visit; frequent visits are assessed over 12 months.",
    },
    {
        "code": "us_vwp",
        "name": "United States (Visa Waiver Program)",
        "type": "country",
        "days_allowed": 90,
        "window_days": 180,
        "counting_method": "rolling",
        "description": "ESTA travelers are admitted for up to 90 days.",
    },
    {
        "code": "us_b1b2",
        "name": "United States (B1/B2 Visa)",
        "type": "country",
        "days_allowed": 180,
        "window_days": 365,
        "counting_method": "rolling",
        "description": "B1/B2 visitors are typically admitted for up to 6 months.",
    },
    {
        "code": "us_ny",
        "name": "New York State residency",
        "type": "state",
        "days_allowed": 183,
        "window_days": 365,
        "counting_method": "calendar_year",
        "description": "Statutory residency test: more than 183 days in the state in a calendar year.",
    },
    {
        "code": "us_ca",
        "name": "California residency",
        "type": "state",
        "days_allowed": 183,
        "window_days": 365,
        "counting_method": "calendar_year",
        "description": "More than 183 days in a calendar year creates a presumption of residency.",
    },
    {
        "code": "us_fl",
        "name": "Florida residency",
        "type": "state",
        "days_allowed": 183,
        "window_days": 365,
        "counting_method": "calendar_year",
        "description": "Days present counted per calendar year.",
    },
    {
        "code": "us_tx",
        "name": "Texas residency",
        "type": "state",
        "days_allowed": 183,
        "window_days": 365,
        "counting_method": "calendar_year",
        "description": "Days present counted per calendar year.",
    },
    {
        "code": "uk_tax_year",
        "name": "UK Statutory Residence Test",
        "type": "country",
        "days_allowed": 183,
        "window_days": 365,
        "counting_method": "fiscal_year",
        "reset_month": 4,
        "reset_day": 6,
        "description": "183 or more days in the UK during a tax year (6 April to 5 April) makes you UK resident.",
    },
]
