import logging
import os
import re
import time
from typing import Optional

from meatshop.core.config import settings
from meatshop.interfaces.IMediaStorage import IObjectStorage

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_key(folder: str, filename: str) -> str:
    """'media', 'my photo.png' -> 'media/1700000000123_my_photo.png'"""
    safe_name = _UNSAFE_CHARS.sub("_", os.path.basename(filename or "upload")).strip("._") or "upload"
    return f"{folder}/{int(time.time() * 1000)}_{safe_name}"


class LocalObjectStorage(IObjectStorage):
    """Bucket stand-in backed by a directory; objects are served under url_prefix."""

    def __init__(self, root: str = settings.MEDIA_ROOT, url_prefix: str = settings.MEDIA_URL_PREFIX):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        logger.info("Stored %s (%s bytes, %s)", key, len(data), content_type or "unknown type")
        return f"{self.url_prefix}/{key}"

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not os.path.exists(path):
            return False
        os.remove(path)
        return True

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        with open(path, "rb") as f:
            return f.read()
