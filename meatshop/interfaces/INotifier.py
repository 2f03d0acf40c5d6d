from abc import ABC, abstractmethod

from meatshop.domain.schemas import OrderOut

class INotifier(ABC):
    @abstractmethod
    def notify_admin_new_order(self, order: OrderOut) -> bool:
        pass
