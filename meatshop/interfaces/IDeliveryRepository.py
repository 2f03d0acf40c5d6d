from abc import ABC, abstractmethod
from typing import List, Optional

from meatshop.domain.schemas import (
    DeliverySettingsIn, DeliverySettingsOut, NonDeliveryDayIn, NonDeliveryDayOut,
)

class IDeliveryRepository(ABC):
    @abstractmethod
    def get_settings(self) -> Optional[DeliverySettingsOut]:
        pass

    @abstractmethod
    def upsert_settings(self, data: DeliverySettingsIn) -> DeliverySettingsOut:
        pass

    @abstractmethod
    def list_non_delivery_days(self) -> List[NonDeliveryDayOut]:
        pass

    @abstractmethod
    def create_non_delivery_day(self, data: NonDeliveryDayIn) -> NonDeliveryDayOut:
        pass

    @abstractmethod
    def delete_non_delivery_day(self, day_id: int) -> bool:
        pass
