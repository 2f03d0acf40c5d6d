from typing import List, Optional

from sqlalchemy import asc, select, update

from meatshop.domain.models import BankAccount
from meatshop.domain.schemas import BankAccountIn, BankAccountOut, BankAccountUpdate
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IBankAccountRepository import IBankAccountRepository


class SqlAlchemyBankAccountRepository(IBankAccountRepository):
    """Bank transfer targets shown at checkout. At most one is the default."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    @staticmethod
    def _clear_default(session, keep_id: Optional[int] = None):
        query = update(BankAccount).where(BankAccount.is_default.is_(True))
        if keep_id is not None:
            query = query.where(BankAccount.id != keep_id)
        session.execute(query.values(is_default=False).execution_options(synchronize_session="fetch"))

    def list_accounts(self) -> List[BankAccountOut]:
        with self.session_factory() as session:
            rows = session.execute(
                select(BankAccount).order_by(asc(BankAccount.bank_name), asc(BankAccount.id))
            ).scalars().all()
            return [BankAccountOut.model_validate(r) for r in rows]

    def get_default(self) -> Optional[BankAccountOut]:
        # With no explicit default, the first account gets promoted
        with self.session_factory() as session, session.begin():
            row = session.execute(
                select(BankAccount).where(BankAccount.is_default.is_(True)).limit(1)
            ).scalar_one_or_none()
            if row is None:
                row = session.execute(select(BankAccount).order_by(asc(BankAccount.id)).limit(1)).scalar_one_or_none()
                if row is None:
                    return None
                row.is_default = True
                session.flush()
            return BankAccountOut.model_validate(row)

    def create_account(self, data: BankAccountIn) -> BankAccountOut:
        with self.session_factory() as session, session.begin():
            if data.is_default:
                self._clear_default(session)
            row = BankAccount(**data.model_dump())
            session.add(row)
            session.flush()
            return BankAccountOut.model_validate(row)

    def update_account(self, account_id: int, data: BankAccountUpdate) -> Optional[BankAccountOut]:
        changes = data.model_dump(exclude_none=True)
        with self.session_factory() as session, session.begin():
            row = session.get(BankAccount, account_id)
            if row is None:
                return None
            if changes.get("is_default"):
                self._clear_default(session, keep_id=account_id)
            for field, value in changes.items():
                setattr(row, field, value)
            session.flush()
            return BankAccountOut.model_validate(row)

    def delete_account(self, account_id: int) -> bool:
        """Refuses to delete the default account."""
        with self.session_factory() as session, session.begin():
            row = session.get(BankAccount, account_id)
            if row is None or row.is_default:
                return False
            session.delete(row)
            return True

    def set_default(self, account_id: int) -> bool:
        with self.session_factory() as session, session.begin():
            row = session.get(BankAccount, account_id)
            if row is None:
                return False
            self._clear_default(session, keep_id=account_id)
            row.is_default = True
            return True
