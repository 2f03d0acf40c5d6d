from abc import ABC, abstractmethod
from typing import List, Optional

from meatshop.domain.schemas import MediaItemOut

class IObjectStorage(ABC):
    """Bucket-style blob store. Keys look like 'media/1700000000_file.png'."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Stores the object and returns its public URL."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass


class IMediaRepository(ABC):
    @abstractmethod
    def list_items(self) -> List[MediaItemOut]:
        pass

    @abstractmethod
    def create_item(self, name: str, content_type: str, url: str, storage_key: str, size: int) -> MediaItemOut:
        pass

    @abstractmethod
    def pop_item(self, item_id: int) -> Optional[str]:
        """Deletes the row and returns its storage key (None if absent)."""
        pass
