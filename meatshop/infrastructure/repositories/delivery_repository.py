from typing import List, Optional

from sqlalchemy import asc, select

from meatshop.domain.models import DeliverySetting, NonDeliveryDay
from meatshop.domain.schemas import (
    DeliverySettingsIn, DeliverySettingsOut, NonDeliveryDayIn, NonDeliveryDayOut,
)
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IDeliveryRepository import IDeliveryRepository

DEFAULT_SETTINGS = DeliverySettingsOut()


class SqlAlchemyDeliveryRepository(IDeliveryRepository):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_settings(self) -> Optional[DeliverySettingsOut]:
        with self.session_factory() as session:
            row = session.execute(
                select(DeliverySetting).order_by(asc(DeliverySetting.id)).limit(1)
            ).scalar_one_or_none()
            return DeliverySettingsOut.model_validate(row) if row else None

    def upsert_settings(self, data: DeliverySettingsIn) -> DeliverySettingsOut:
        """Keeps exactly one logical row. Missing fields fall back to the current (or default) values."""
        changes = data.model_dump(exclude_none=True)
        with self.session_factory() as session, session.begin():
            row = session.execute(
                select(DeliverySetting).order_by(asc(DeliverySetting.id)).limit(1)
            ).scalar_one_or_none()
            if row is None:
                row = DeliverySetting(
                    cutoff_hour=changes.get("cutoff_hour", DEFAULT_SETTINGS.cutoff_hour),
                    cutoff_minute=changes.get("cutoff_minute", DEFAULT_SETTINGS.cutoff_minute),
                    processing_days=changes.get("processing_days", DEFAULT_SETTINGS.processing_days),
                )
                session.add(row)
            else:
                for field, value in changes.items():
                    setattr(row, field, value)
            session.flush()
            session.refresh(row)
            return DeliverySettingsOut.model_validate(row)

    def list_non_delivery_days(self) -> List[NonDeliveryDayOut]:
        with self.session_factory() as session:
            rows = session.execute(select(NonDeliveryDay).order_by(asc(NonDeliveryDay.date))).scalars().all()
            return [NonDeliveryDayOut.model_validate(r) for r in rows]

    def create_non_delivery_day(self, data: NonDeliveryDayIn) -> NonDeliveryDayOut:
        with self.session_factory() as session, session.begin():
            row = NonDeliveryDay(**data.model_dump())
            session.add(row)
            session.flush()
            return NonDeliveryDayOut.model_validate(row)

    def delete_non_delivery_day(self, day_id: int) -> bool:
        with self.session_factory() as session, session.begin():
            row = session.get(NonDeliveryDay, day_id)
            if row is None:
                return False
            session.delete(row)
            return True
