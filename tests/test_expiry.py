"""Tests for days-until-expiry calculations."""

import pytest
from datetime import date, datetime, timezone

from pantryplan.data_layer.models import NO_EXPIRY_DAYS, PantryItem
from pantryplan.scoring.expiry import (
    days_until_expiry,
    parse_expiry_date,
    soon_to_expire,
    sort_by_urgency,
)

NOW = datetime(2026, 3, 10, 0, 0)


class TestDaysUntilExpiry:
    """Sentinel for missing dates, ceiling rounding, floor of 1."""

    def test_missing_date_uses_sentinel(self):
        assert days_until_expiry(PantryItem("Rice"), NOW) == NO_EXPIRY_DAYS == 100

    def test_tomorrow_is_one_day(self):
        assert days_until_expiry(PantryItem("Milk", date(2026, 3, 11)), NOW) == 1

    def test_ten_days(self):
        assert days_until_expiry(PantryItem("Cheese", date(2026, 3, 20)), NOW) == 10

    def test_partial_day_rounds_up(self):
        now = datetime(2026, 3, 10, 18, 0)
        # 2026-03-12 00:00 is 1.25 days away
        assert days_until_expiry(PantryItem("Milk", date(2026, 3, 12)), now) == 2

    def test_today_and_expired_floor_to_one(self):
        assert days_until_expiry(PantryItem("Milk", date(2026, 3, 10)), NOW) == 1
        assert days_until_expiry(PantryItem("Milk", date(2026, 3, 1)), NOW) == 1

    def test_accepts_date_as_now(self):
        assert days_until_expiry(PantryItem("Milk", date(2026, 3, 13)), date(2026, 3, 10)) == 3


class TestParseExpiryDate:
    def test_iso_date(self):
        assert parse_expiry_date("2026-03-11") == date(2026, 3, 11)

    def test_js_timestamp(self):
        assert parse_expiry_date("2026-03-11T09:30:00.000Z") == date(2026, 3, 11)

    def test_date_and_datetime_objects(self):
        assert parse_expiry_date(date(2026, 3, 11)) == date(2026, 3, 11)
        assert parse_expiry_date(datetime(2026, 3, 11, 8, tzinfo=timezone.utc)) == date(2026, 3, 11)

    @pytest.mark.parametrize("value", [None, "", "   ", "next tuesday", 42])
    def test_unparseable_is_none(self, value):
        assert parse_expiry_date(value) is None


class TestUrgencyHelpers:
    @pytest.fixture
    def pantry(self):
        return [
            PantryItem("Rice"),
            PantryItem("Yogurt", date(2026, 3, 15)),
            PantryItem("Spinach", date(2026, 3, 11)),
            PantryItem("Eggs", date(2026, 3, 15)),
        ]

    def test_sort_by_urgency_is_stable(self, pantry):
        names = [item.name for item in sort_by_urgency(pantry, NOW)]
        assert names == ["Spinach", "Yogurt", "Eggs", "Rice"]

    def test_soon_to_expire_skips_undated_and_limits(self, pantry):
        names = [item.name for item in soon_to_expire(pantry, NOW, limit=2)]
        assert names == ["Spinach", "Yogurt"]
