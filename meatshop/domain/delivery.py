"""
Delivery date calculation.

Pure functions: given "now", the delivery settings and the list of
non-delivery days, work out when an order placed now would arrive.
"""
from datetime import date, datetime, timedelta
from typing import Iterable

from meatshop.domain.errors import DeliveryWindowExhausted
from meatshop.domain.schemas import DeliveryEstimate, DeliverySettingsOut, NonDeliveryDayOut

DEFAULT_SEARCH_DAYS = 365

# Index 0 is Monday (date.weekday())
WEEKDAYS = {
    "mn": ["Даваа", "Мягмар", "Лхагва", "Пүрэв", "Баасан", "Бямба", "Ням"],
    "ko": ["월", "화", "수", "목", "금", "토", "일"],
    "ru": ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"],
    "en": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
}

DELIVERY_MESSAGES = {
    "mn": "хүргэгдэнэ",
    "ko": "배송",
    "ru": "доставка",
    "en": "delivery",
}

FALLBACK_LANGUAGE = "mn"


def is_non_delivery_day(day: date, non_delivery_days: Iterable[NonDeliveryDayOut]) -> bool:
    """Recurring entries match on (month, day) in every year, the rest on the exact date."""
    for entry in non_delivery_days:
        if entry.is_recurring_yearly:
            if (entry.date.month, entry.date.day) == (day.month, day.day):
                return True
        elif entry.date == day:
            return True
    return False


def calculate_delivery_date(
    settings: DeliverySettingsOut,
    non_delivery_days: Iterable[NonDeliveryDayOut],
    now: datetime,
    max_days: int = DEFAULT_SEARCH_DAYS,
) -> date:
    non_delivery_days = list(non_delivery_days)

    # Orders after the cutoff start processing a day later
    before_cutoff = (now.hour, now.minute) < (settings.cutoff_hour, settings.cutoff_minute)
    start = now.date() if before_cutoff else now.date() + timedelta(days=1)

    candidate = start + timedelta(days=settings.processing_days)
    for _ in range(max_days):
        if not is_non_delivery_day(candidate, non_delivery_days):
            return candidate
        candidate += timedelta(days=1)

    raise DeliveryWindowExhausted(max_days)


def format_delivery_date(day: date, language: str = FALLBACK_LANGUAGE) -> str:
    weekday = WEEKDAYS.get(language, WEEKDAYS[FALLBACK_LANGUAGE])[day.weekday()]
    if language == "ko":
        return f"{day.month}월/{day.day}({weekday})"
    if language == "en":
        return f"{day.month}/{day.day}({weekday})"
    if language == "ru":
        return f"{day.day}.{day.month}({weekday})"
    return f"{day.month} сар/{day.day}({weekday})"


def delivery_message(language: str = FALLBACK_LANGUAGE) -> str:
    return DELIVERY_MESSAGES.get(language, DELIVERY_MESSAGES[FALLBACK_LANGUAGE])


def estimate_delivery(
    settings: DeliverySettingsOut,
    non_delivery_days: Iterable[NonDeliveryDayOut],
    now: datetime,
    language: str = FALLBACK_LANGUAGE,
    max_days: int = DEFAULT_SEARCH_DAYS,
) -> DeliveryEstimate:
    day = calculate_delivery_date(settings, non_delivery_days, now, max_days=max_days)
    return DeliveryEstimate(
        date=day,
        formatted=format_delivery_date(day, language),
        message=delivery_message(language),
        language=language if language in WEEKDAYS else FALLBACK_LANGUAGE,
    )
