from datetime import date, datetime, timedelta

import pytest
import pytz

from meatshop.application.delivery_service import DeliveryService
from meatshop.domain.delivery import (
    calculate_delivery_date, delivery_message, estimate_delivery, format_delivery_date,
    is_non_delivery_day,
)
from meatshop.domain.errors import DeliveryWindowExhausted
from meatshop.domain.schemas import DeliverySettingsIn, DeliverySettingsOut, NonDeliveryDayIn, NonDeliveryDayOut

SETTINGS = DeliverySettingsOut(cutoff_hour=18, cutoff_minute=30, processing_days=1)


def holiday(day, recurring=False):
    return NonDeliveryDayOut(date=day, reason="holiday", is_recurring_yearly=recurring)


def test_before_cutoff_delivers_after_processing_days():
    assert calculate_delivery_date(SETTINGS, [], datetime(2024, 3, 10, 17, 0)) == date(2024, 3, 11)


def test_after_cutoff_adds_a_day():
    assert calculate_delivery_date(SETTINGS, [], datetime(2024, 3, 10, 19, 0)) == date(2024, 3, 12)


def test_exactly_at_cutoff_counts_as_after():
    assert calculate_delivery_date(SETTINGS, [], datetime(2024, 3, 10, 18, 30)) == date(2024, 3, 12)
    assert calculate_delivery_date(SETTINGS, [], datetime(2024, 3, 10, 18, 29, 59)) == date(2024, 3, 11)


@pytest.mark.parametrize("processing_days", [1, 2, 5])
def test_no_holidays_rule_holds_for_every_hour(processing_days):
    settings = DeliverySettingsOut(cutoff_hour=12, cutoff_minute=0, processing_days=processing_days)
    day = datetime(2024, 6, 1)
    for hour in range(24):
        now = day.replace(hour=hour, minute=15)
        extra = 0 if hour < 12 else 1
        expected = now.date() + timedelta(days=processing_days + extra)
        assert calculate_delivery_date(settings, [], now) == expected


def test_non_recurring_holiday_shifts_delivery():
    days = [holiday(date(2024, 3, 12))]
    assert calculate_delivery_date(SETTINGS, days, datetime(2024, 3, 10, 19, 0)) == date(2024, 3, 13)


def test_consecutive_holidays_return_first_free_day():
    days = [holiday(date(2024, 3, 12)), holiday(date(2024, 3, 13)), holiday(date(2024, 3, 15))]
    assert calculate_delivery_date(SETTINGS, days, datetime(2024, 3, 10, 19, 0)) == date(2024, 3, 14)


def test_non_recurring_holiday_only_applies_to_its_year():
    days = [holiday(date(2023, 3, 12))]
    assert calculate_delivery_date(SETTINGS, days, datetime(2024, 3, 10, 19, 0)) == date(2024, 3, 12)


def test_recurring_holiday_matches_every_year():
    days = [holiday(date(2020, 3, 12), recurring=True)]
    for year in (2024, 2025, 2031):
        now = datetime(year, 3, 10, 19, 0)
        assert calculate_delivery_date(SETTINGS, days, now) == date(year, 3, 13)


def test_recurring_leap_day():
    days = [holiday(date(2024, 2, 29), recurring=True)]
    assert calculate_delivery_date(SETTINGS, days, datetime(2028, 2, 28, 10, 0)) == date(2028, 3, 1)
    # No Feb 29 in 2027, nothing to skip
    assert calculate_delivery_date(SETTINGS, days, datetime(2027, 2, 27, 10, 0)) == date(2027, 2, 28)
    assert is_non_delivery_day(date(2032, 2, 29), days)


def test_never_returns_an_excluded_date():
    start = datetime(2024, 12, 20, 9, 0)
    days = [holiday(date(2024, 12, 21) + timedelta(days=i)) for i in range(0, 12, 2)]
    result = calculate_delivery_date(SETTINGS, days, start)
    assert not is_non_delivery_day(result, days)
    assert result >= date(2024, 12, 21)
    # every day between the naive candidate and the result is excluded
    day = date(2024, 12, 21)
    while day < result:
        assert is_non_delivery_day(day, days)
        day += timedelta(days=1)


def test_fully_blocked_window_fails_explicitly():
    days = [holiday(date(2024, 1, 1), recurring=False)]
    days += [holiday(date(2024, 3, 11) + timedelta(days=i)) for i in range(40)]
    with pytest.raises(DeliveryWindowExhausted):
        calculate_delivery_date(SETTINGS, days, datetime(2024, 3, 10, 10, 0), max_days=30)


@pytest.mark.parametrize("language, expected", [
    ("mn", "3 сар/11(Даваа)"),
    ("ko", "3월/11(월)"),
    ("en", "3/11(Mon)"),
    ("ru", "11.3(Пн)"),
    ("fr", "3 сар/11(Даваа)"),
])
def test_format_delivery_date(language, expected):
    assert format_delivery_date(date(2024, 3, 11), language) == expected


def test_delivery_message_falls_back_to_mongolian():
    assert delivery_message("en") == "delivery"
    assert delivery_message("xx") == "хүргэгдэнэ"


def test_estimate_bundles_date_and_text():
    estimate = estimate_delivery(SETTINGS, [], datetime(2024, 3, 10, 17, 0), language="en")
    assert estimate.date == date(2024, 3, 11)
    assert estimate.formatted == "3/11(Mon)"
    assert estimate.message == "delivery"


class FakeDeliveryRepo:
    def __init__(self, settings=None, days=()):
        self.settings = settings
        self.days = list(days)

    def get_settings(self):
        return self.settings

    def list_non_delivery_days(self):
        return self.days

    def upsert_settings(self, data):
        current = self.settings or DeliverySettingsOut()
        self.settings = current.model_copy(update=data.model_dump(exclude_none=True))
        return self.settings

    def create_non_delivery_day(self, data):
        day = NonDeliveryDayOut(id=len(self.days) + 1, **data.model_dump())
        self.days.append(day)
        return day

    def delete_non_delivery_day(self, day_id):
        kept = [d for d in self.days if d.id != day_id]
        removed = len(kept) != len(self.days)
        self.days = kept
        return removed


def test_service_uses_defaults_when_nothing_saved():
    service = DeliveryService(FakeDeliveryRepo(), timezone="Asia/Ulaanbaatar")
    current = service.current_settings()
    assert (current.cutoff_hour, current.cutoff_minute, current.processing_days) == (18, 30, 1)


def test_service_evaluates_cutoff_in_shop_timezone():
    service = DeliveryService(FakeDeliveryRepo(SETTINGS), timezone="Asia/Ulaanbaatar")
    # 10:00 UTC is 18:00 in Ulaanbaatar, before the cutoff
    early = pytz.utc.localize(datetime(2024, 3, 10, 10, 0))
    # 11:00 UTC is 19:00 in Ulaanbaatar, after the cutoff
    late = pytz.utc.localize(datetime(2024, 3, 10, 11, 0))
    assert service.estimate("en", now=early).date == date(2024, 3, 11)
    assert service.estimate("en", now=late).date == date(2024, 3, 12)


def test_service_treats_naive_now_as_shop_local_time():
    service = DeliveryService(FakeDeliveryRepo(SETTINGS), timezone="Asia/Ulaanbaatar")
    assert service.local_now(datetime(2024, 3, 10, 19, 0)).hour == 19
    assert service.estimate("mn", now=datetime(2024, 3, 10, 19, 0)).date == date(2024, 3, 12)


def test_service_edits_feed_the_estimate():
    service = DeliveryService(FakeDeliveryRepo(), timezone="Asia/Ulaanbaatar")
    now = datetime(2024, 3, 10, 12, 0)
    assert service.estimate("en", now=now).date == date(2024, 3, 11)

    service.update_settings(DeliverySettingsIn(processing_days=2))
    assert service.current_settings().cutoff_hour == 18
    assert service.estimate("en", now=now).date == date(2024, 3, 12)

    day = service.add_day(NonDeliveryDayIn(date=date(2024, 3, 12), reason="Inventory"))
    assert [d.id for d in service.list_days()] == [day.id]
    assert service.estimate("en", now=now).date == date(2024, 3, 13)

    assert service.remove_day(day.id) is True
    assert service.remove_day(day.id) is False
    assert service.estimate("en", now=now).date == date(2024, 3, 12)
