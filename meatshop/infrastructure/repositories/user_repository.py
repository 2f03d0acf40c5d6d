import logging
from typing import Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from meatshop.domain.errors import ValidationError
from meatshop.domain.models import User
from meatshop.domain.schemas import RegisterRequest, UserOut
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IUserRepository import IUserRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUserRepository(IUserRepository):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_user(self, user_id: int) -> Optional[UserOut]:
        with self.session_factory() as session:
            user = session.get(User, user_id)
            return UserOut.model_validate(user) if user else None

    def authenticate(self, login: str, password: str) -> Optional[UserOut]:
        """`login` may be the username or the email address."""
        with self.session_factory() as session:
            user = session.execute(
                select(User).where(or_(User.username == login, User.email == login)).limit(1)
            ).scalar_one_or_none()
            if user is None or not user.check_password(password):
                return None
            return UserOut.model_validate(user)

    def create_user(self, data: RegisterRequest, is_admin: bool = False) -> UserOut:
        """Username and email must both be unused (400 otherwise)."""
        with self.session_factory() as session:
            if session.execute(select(User.id).where(User.username == data.username)).first():
                raise ValidationError("Username is already registered")
            if session.execute(select(User.id).where(User.email == data.email)).first():
                raise ValidationError("Email is already registered")

            user = User(
                username=data.username,
                email=data.email,
                name=data.name or "",
                phone=data.phone,
                is_admin=is_admin,
            )
            user.set_password(data.password)
            session.add(user)
            try:
                session.commit()
            except IntegrityError as e:
                # Lost a race with a concurrent registration
                session.rollback()
                raise ValidationError("Username or email is already registered") from e

            logger.info("👤 User %s registered (admin=%s)", user.id, is_admin)
            return UserOut.model_validate(user)

    def ensure_admin(self, username: str, email: str, password: str) -> Tuple[UserOut, bool]:
        with self.session_factory() as session:
            existing = session.execute(select(User).where(User.username == username)).scalar_one_or_none()
            if existing is not None:
                return UserOut.model_validate(existing), False

        data = RegisterRequest(username=username, email=email, password=password, name="Admin")
        return self.create_user(data, is_admin=True), True
