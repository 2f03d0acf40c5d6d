from typing import List, Optional

from sqlalchemy import desc, select

from meatshop.domain.models import MediaItem
from meatshop.domain.schemas import MediaItemOut
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IMediaStorage import IMediaRepository


class SqlAlchemyMediaRepository(IMediaRepository):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def list_items(self) -> List[MediaItemOut]:
        with self.session_factory() as session:
            rows = session.execute(select(MediaItem).order_by(desc(MediaItem.id))).scalars().all()
            return [MediaItemOut.model_validate(r) for r in rows]

    def create_item(self, name: str, content_type: str, url: str, storage_key: str, size: int) -> MediaItemOut:
        with self.session_factory() as session, session.begin():
            row = MediaItem(name=name, type=content_type, url=url, storage_key=storage_key, size=size)
            session.add(row)
            session.flush()
            return MediaItemOut.model_validate(row)

    def pop_item(self, item_id: int) -> Optional[str]:
        with self.session_factory() as session, session.begin():
            row = session.get(MediaItem, item_id)
            if row is None:
                return None
            key = row.storage_key
            session.delete(row)
            return key
