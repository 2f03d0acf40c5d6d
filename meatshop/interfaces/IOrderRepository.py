from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from meatshop.domain.schemas import NewOrder, OrderOut

class IOrderRepository(ABC):
    @abstractmethod
    def create_order(self, new_order: NewOrder, idempotency_key: Optional[str] = None) -> OrderOut:
        pass

    @abstractmethod
    def get_order_with_items(self, order_id: int) -> Optional[OrderOut]:
        pass

    @abstractmethod
    def find_by_idempotency_key(self, key: str) -> Optional[OrderOut]:
        pass

    @abstractmethod
    def list_orders(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[OrderOut]:
        pass

    @abstractmethod
    def list_user_orders(self, user_id: int) -> List[OrderOut]:
        pass

    @abstractmethod
    def update_status(self, order_id: int, status: str) -> Optional[OrderOut]:
        pass

    @abstractmethod
    def pending_count(self) -> int:
        pass
