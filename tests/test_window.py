from datetime import datetime, timedelta, timezone

import pytest

from core.analytics.types import UserRecord
from core.analytics.window import (
    AnalyticsFilters, build_window, clean_filter, parse_compare, parse_period_days, resolve_query
)

NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestParsePeriodDays:

    def test_default_when_missing(self):
        assert parse_period_days(None) == 90

    @pytest.mark.parametrize("value", ["abc", "", "  ", "+"])
    def test_default_when_not_numeric(self, value):
        assert parse_period_days(value) == 90

    def test_numeric_string(self):
        assert parse_period_days("30") == 30

    def test_leading_integer(self):
        assert parse_period_days("45days") == 45
        assert parse_period_days("7.9") == 7

    @pytest.mark.parametrize("value", ["0", "-5", -10, 0])
    def test_clamped_to_one(self, value):
        assert parse_period_days(value) == 1

    def test_large_period_kept(self):
        assert parse_period_days("5000") == 5000

    def test_large_period_window(self):
        query = resolve_query(period_days="5000", now=NOW)
        assert query.window.period_days == 5000
        assert query.window.since == NOW - timedelta(days=5000)
        assert query.window.prev_since == NOW - timedelta(days=10000)

    def test_out_of_range_period_overflows(self):
        with pytest.raises(OverflowError):
            resolve_query(period_days="99999999999", now=NOW)


class TestParseCompare:

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "Yes", "0,yes", "false,1"])
    def test_enabled(self, value):
        assert parse_compare(value) is True

    @pytest.mark.parametrize("value", [None, "", "0", "false", "no", "on", " true"])
    def test_disabled(self, value):
        assert parse_compare(value) is False


def test_clean_filter():
    assert clean_filter(None) is None
    assert clean_filter("   ") is None
    assert clean_filter("  wg-1 ") == "wg-1"


def test_build_window_bounds():
    window = build_window(30, NOW)
    assert window.until == NOW
    assert window.since == NOW - timedelta(days=30)
    assert window.prev_since == NOW - timedelta(days=60)
    assert window.prev_until == window.since - timedelta(milliseconds=1)
    # Equal length, strictly before the current window
    assert window.since - window.prev_since == window.until - window.since
    assert window.prev_until < window.since


def test_build_window_naive_now_is_utc():
    window = build_window(1, datetime(2024, 3, 15, 12, 0, 0))
    assert window.until.tzinfo is not None


def test_resolve_query():
    query = resolve_query(
        period_days="60", compare="yes", work_group_id=" wg-1 ", country=" ", proposal_type="GRANT",
        now=NOW,
    )
    assert query.window.period_days == 60
    assert query.compare is True
    assert query.filters == AnalyticsFilters(work_group_id="wg-1", country=None, proposal_type="GRANT")


class TestCountryFilter:

    def _user(self, country):
        return UserRecord(id="u", name=None, email=None, role="USER", status=None,
                          country=country, created_at=NOW)

    def test_no_filter_matches_everyone(self):
        assert AnalyticsFilters().matches_country(None)
        assert AnalyticsFilters().matches_country(self._user(None))

    def test_case_insensitive(self):
        filters = AnalyticsFilters(country="Argentina")
        assert filters.matches_country(self._user("ARGENTINA"))
        assert not filters.matches_country(self._user("Chile"))
        assert not filters.matches_country(self._user(None))

    def test_unknown_user_excluded(self):
        assert not AnalyticsFilters(country="Argentina").matches_country(None)
