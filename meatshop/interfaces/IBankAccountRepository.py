from abc import ABC, abstractmethod
from typing import List, Optional

from meatshop.domain.schemas import BankAccountIn, BankAccountOut, BankAccountUpdate

class IBankAccountRepository(ABC):
    @abstractmethod
    def list_accounts(self) -> List[BankAccountOut]:
        pass

    @abstractmethod
    def get_default(self) -> Optional[BankAccountOut]:
        pass

    @abstractmethod
    def create_account(self, data: BankAccountIn) -> BankAccountOut:
        pass

    @abstractmethod
    def update_account(self, account_id: int, data: BankAccountUpdate) -> Optional[BankAccountOut]:
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> bool:
        pass

    @abstractmethod
    def set_default(self, account_id: int) -> bool:
        pass
