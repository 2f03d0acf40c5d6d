from abc import ABC, abstractmethod
from typing import Optional, Tuple

from meatshop.domain.schemas import RegisterRequest, UserOut

class IUserRepository(ABC):
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserOut]:
        pass

    @abstractmethod
    def authenticate(self, login: str, password: str) -> Optional[UserOut]:
        pass

    @abstractmethod
    def create_user(self, data: RegisterRequest, is_admin: bool = False) -> UserOut:
        pass

    @abstractmethod
    def ensure_admin(self, username: str, email: str, password: str) -> Tuple[UserOut, bool]:
        """Creates the admin account unless the username already exists. Returns (user, created)."""
        pass
