"""Helper functions for urgency and date calculations."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .errors import ParseError, ValidationError
from .urgency import UrgencyTier

DateLike = Union[date, datetime, str]

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class DateThresholds:
    """Inclusive day boundaries for the URGENT and SOON tiers."""

    urgent_days: int = 7
    soon_days: int = 30

    def __post_init__(self):
        if self.urgent_days < 0 or self.soon_days < self.urgent_days:
            raise ValidationError(
                f"Invalid day thresholds: urgent={self.urgent_days}, soon={self.soon_days}"
            )


@dataclass(frozen=True)
class DistanceThresholds:
    """Inclusive kilometre boundaries for the URGENT and SOON tiers."""

    urgent_km: int = 500
    soon_km: int = 1000

    def __post_init__(self):
        if self.urgent_km < 0 or self.soon_km < self.urgent_km:
            raise ValidationError(
                f"Invalid km thresholds: urgent={self.urgent_km}, soon={self.soon_km}"
            )


# The maintenance and expense views bucket dates differently; keep both.
MAINTENANCE_DATE_THRESHOLDS = DateThresholds(urgent_days=7, soon_days=30)
EXPENSE_DATE_THRESHOLDS = DateThresholds(urgent_days=7, soon_days=14)
DISTANCE_THRESHOLDS = DistanceThresholds(urgent_km=500, soon_km=1000)


@dataclass(frozen=True)
class DateUrgency:
    days_offset: int
    tier: UrgencyTier


@dataclass(frozen=True)
class DistanceUrgency:
    km_remaining: int
    tier: UrgencyTier


def require_number(
    value, field: str = "value", allow_negative: bool = True
) -> float:
    """
    Coerce an incoming amount to float, rejecting anything that would
    poison a sum (None, booleans, NaN, infinities, junk strings).
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number, got {value!r}")
    if isinstance(value, (Real, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number, got {value!r}") from None
    else:
        raise ValidationError(f"{field} must be a number, got {type(value).__name__}")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field} must be finite, got {value!r}")
    if not allow_negative and number < 0:
        raise ValidationError(f"{field} must not be negative, got {number}")
    return number


def optional_number(value, field: str = "value", allow_negative: bool = True):
    """Like require_number, but empty values map to None."""
    if value is None or value == "":
        return None
    return require_number(value, field, allow_negative)


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """
    Parse an ISO-8601 date or timestamp into a calendar date.

    Timestamps keep the calendar date they were written with; a UTC
    offset never shifts it.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        try:
            moment = isoparse(value.strip())
        except (ValueError, OverflowError) as e:
            raise ParseError(f"Invalid date {value!r}: {e}") from e
    else:
        raise ParseError(f"Invalid date {value!r}: expected ISO string or date")
    return moment.date()


def days_until(target: DateLike, today: DateLike) -> int:
    """
    Signed whole days from today to target, rounded up.

    Two timestamps of matching awareness are compared to the second; any
    other combination is compared by calendar date.
    """
    if isinstance(target, datetime) and isinstance(today, datetime):
        if (target.tzinfo is None) == (today.tzinfo is None):
            seconds = (target - today).total_seconds()
            return math.ceil(seconds / SECONDS_PER_DAY)
    target_date = parse_date(target)
    today_date = parse_date(today)
    if target_date is None or today_date is None:
        raise ParseError("Both target and today are required")
    return (target_date - today_date).days


def tier_for_offset(offset: float, urgent: float, soon: float) -> UrgencyTier:
    """Bucket a signed remaining amount into an urgency tier."""
    if offset < 0:
        return UrgencyTier.OVERDUE
    if offset <= urgent:
        return UrgencyTier.URGENT
    if offset <= soon:
        return UrgencyTier.SOON
    return UrgencyTier.SCHEDULED


def classify_by_date(
    target: DateLike,
    today: DateLike,
    thresholds: DateThresholds = MAINTENANCE_DATE_THRESHOLDS,
) -> DateUrgency:
    """Classify a scheduled date relative to today."""
    if target is None or target == "":
        raise ParseError("A target date is required")
    offset = days_until(target, today)
    tier = tier_for_offset(offset, thresholds.urgent_days, thresholds.soon_days)
    return DateUrgency(days_offset=offset, tier=tier)


def classify_by_distance(
    target_km,
    current_km,
    thresholds: DistanceThresholds = DISTANCE_THRESHOLDS,
) -> DistanceUrgency:
    """Classify a scheduled odometer reading against the live one."""
    target = require_number(target_km, "target_km")
    current = require_number(current_km, "current_km")
    remaining = int(round(target - current))
    tier = tier_for_offset(remaining, thresholds.urgent_km, thresholds.soon_km)
    return DistanceUrgency(km_remaining=remaining, tier=tier)


def relative_day_label(days: int) -> str:
    """Spanish label for a day offset (Hoy, Mañana, Vencido, En N días)."""
    if days < 0:
        return "Vencido"
    if days == 0:
        return "Hoy"
    if days == 1:
        return "Mañana"
    return f"En {days} días"


def calc_next_payment(due: Optional[date], interval_months: Optional[int]) -> Optional[date]:
    """Next payment date one cadence step after `due`."""
    if due is None or not interval_months:
        return None
    return due + relativedelta(months=interval_months)
