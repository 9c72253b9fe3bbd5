"""
Resolution of analytics request parameters into a time window and filters.

Malformed parameters are normalized, never rejected.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from core.config import settings
from .types import UserRecord, ensure_utc

COMPARE_TOKENS = ("1", "true", "yes")


@dataclass(frozen=True)
class AnalyticsWindow:
    """Current window ``[since, until)`` and the equal-length window before it."""
    period_days: int
    since: datetime
    until: datetime
    prev_since: datetime
    prev_until: datetime


@dataclass(frozen=True)
class AnalyticsFilters:
    work_group_id: Optional[str] = None
    country: Optional[str] = None
    proposal_type: Optional[str] = None

    def matches_country(self, user: Optional[UserRecord]) -> bool:
        """True when no country filter is set or the user's country matches it."""
        if not self.country:
            return True
        if user is None:
            return False
        return (user.country or "").lower() == self.country.lower()


@dataclass(frozen=True)
class AnalyticsQuery:
    window: AnalyticsWindow
    filters: AnalyticsFilters = field(default_factory=AnalyticsFilters)
    compare: bool = False


def parse_period_days(value: Any, default: Optional[int] = None) -> int:
    """Parse ``periodDays``: non-numeric falls back to the default, clamps to >= 1."""
    default = default if default is not None else settings.analytics_default_period_days
    if value is None or isinstance(value, bool):
        days = default
    elif isinstance(value, int):
        days = value
    else:
        text = str(value).strip()
        # Accept a leading integer ("30", "30days", "-5") the way a lenient parser would
        digits = ""
        for index, char in enumerate(text):
            if char.isdigit() or (index == 0 and char in "+-"):
                digits += char
            else:
                break
        try:
            days = int(digits)
        except ValueError:
            days = default
    return max(1, days)


def parse_compare(value: Any) -> bool:
    """Parse a comma-delimited flag list; any of 1/true/yes enables comparison."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    tokens = str(value).lower().split(",")
    return any(token in COMPARE_TOKENS for token in tokens)


def clean_filter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def build_window(period_days: int, now: datetime) -> AnalyticsWindow:
    now = ensure_utc(now)
    period = timedelta(days=period_days)
    since = now - period
    prev_since = since - period
    return AnalyticsWindow(
        period_days=period_days,
        since=since,
        until=now,
        prev_since=prev_since,
        prev_until=since - timedelta(milliseconds=1),
    )


def resolve_query(
    period_days: Any = None,
    compare: Any = None,
    work_group_id: Optional[str] = None,
    country: Optional[str] = None,
    proposal_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AnalyticsQuery:
    """Turn raw request parameters into a normalized analytics query."""
    now = now or datetime.now(timezone.utc)
    return AnalyticsQuery(
        window=build_window(parse_period_days(period_days), now),
        filters=AnalyticsFilters(
            work_group_id=clean_filter(work_group_id),
            country=clean_filter(country),
            proposal_type=clean_filter(proposal_type),
        ),
        compare=parse_compare(compare),
    )
