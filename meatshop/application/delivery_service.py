from datetime import datetime
from typing import List, Optional

import pytz

from meatshop.core.config import settings
from meatshop.domain.delivery import estimate_delivery
from meatshop.domain.schemas import (
    DeliveryEstimate, DeliverySettingsIn, DeliverySettingsOut, NonDeliveryDayIn, NonDeliveryDayOut,
)
from meatshop.interfaces.IDeliveryRepository import IDeliveryRepository


class DeliveryService:
    def __init__(
        self,
        delivery_repo: IDeliveryRepository,
        timezone: str = settings.TIMEZONE,
        max_days: int = settings.DELIVERY_SEARCH_DAYS,
    ):
        self.delivery_repo = delivery_repo
        self.timezone = pytz.timezone(timezone)
        self.max_days = max_days

    def current_settings(self) -> DeliverySettingsOut:
        """Stored settings, or the 18:30 / 1 day defaults when none were saved yet."""
        return self.delivery_repo.get_settings() or DeliverySettingsOut()

    def update_settings(self, data: DeliverySettingsIn) -> DeliverySettingsOut:
        return self.delivery_repo.upsert_settings(data)

    def list_days(self) -> List[NonDeliveryDayOut]:
        return self.delivery_repo.list_non_delivery_days()

    def add_day(self, data: NonDeliveryDayIn) -> NonDeliveryDayOut:
        return self.delivery_repo.create_non_delivery_day(data)

    def remove_day(self, day_id: int) -> bool:
        return self.delivery_repo.delete_non_delivery_day(day_id)

    def local_now(self, now: Optional[datetime] = None) -> datetime:
        if now is None:
            return datetime.now(self.timezone)
        if now.tzinfo is None:
            return self.timezone.localize(now)
        return now.astimezone(self.timezone)

    def estimate(self, language: str = settings.DEFAULT_LANGUAGE, now: Optional[datetime] = None) -> DeliveryEstimate:
        return estimate_delivery(
            self.current_settings(),
            self.delivery_repo.list_non_delivery_days(),
            self.local_now(now),
            language=language,
            max_days=self.max_days,
        )
