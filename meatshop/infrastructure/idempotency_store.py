import json
import logging
import threading
import time
from typing import Optional

import redis
from redis.exceptions import RedisError

from meatshop.core.config import settings

logger = logging.getLogger(__name__)

# Record states
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


class IdempotencyStore:
    """
    Remembers Idempotency-Key headers of order submissions for a time window.

    Records look like {"fingerprint": "<sha256>", "status": "...", "order_id": 12}.
    Redis is the primary store; RAM is used when Redis is not configured or
    stops answering.
    """

    def __init__(self, redis_url: Optional[str] = settings.REDIS_URL, ttl: int = settings.IDEMPOTENCY_TTL_SECONDS):
        self.ttl = ttl
        self.redis = None
        self.redis_available = False

        # 1. Primary Memory (Redis)
        if redis_url:
            try:
                self.redis = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
                self.redis.ping()
                self.redis_available = True
                logger.info("✅ IdempotencyStore: Connected to Redis.")
            except RedisError as e:
                logger.warning("⚠️ IdempotencyStore: Redis unreachable (%s). Using RAM fallback.", e)
        else:
            logger.info("IdempotencyStore: REDIS_URL not set. Using RAM.")

        # 2. Fallback Memory (RAM): key -> (record, expires_at)
        self._memory_store: dict[str, tuple[dict, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(key: str) -> str:
        return f"idempotency:{key}"

    def reserve(self, key: str, fingerprint: str) -> Optional[dict]:
        """
        Claims the key for a new request.
        Returns None when the claim succeeded, otherwise the existing record.
        """
        record = {"fingerprint": fingerprint, "status": STATUS_IN_PROGRESS, "order_id": None}
        full_key = self._key(key)

        if self.redis_available:
            try:
                if self.redis.set(full_key, json.dumps(record), nx=True, ex=self.ttl):
                    return None
                existing = self.redis.get(full_key)
                if existing:
                    return json.loads(existing)
                # Expired between SET and GET, try once more
                return None if self.redis.set(full_key, json.dumps(record), nx=True, ex=self.ttl) else record
            except RedisError as e:
                self._handle_redis_error(e)

        with self._lock:
            existing = self._get_from_memory(full_key)
            if existing is not None:
                return existing
            self._memory_store[full_key] = (record, time.monotonic() + self.ttl)
            return None

    def complete(self, key: str, fingerprint: str, order_id: int) -> None:
        record = {"fingerprint": fingerprint, "status": STATUS_COMPLETED, "order_id": order_id}
        full_key = self._key(key)

        if self.redis_available:
            try:
                self.redis.setex(full_key, self.ttl, json.dumps(record))
                return
            except RedisError as e:
                self._handle_redis_error(e)

        with self._lock:
            self._memory_store[full_key] = (record, time.monotonic() + self.ttl)

    def release(self, key: str) -> None:
        """Forgets a failed attempt so the client can retry with the same key."""
        full_key = self._key(key)

        if self.redis_available:
            try:
                self.redis.delete(full_key)
            except RedisError as e:
                self._handle_redis_error(e)

        with self._lock:
            self._memory_store.pop(full_key, None)

    def _get_from_memory(self, full_key: str) -> Optional[dict]:
        entry = self._memory_store.get(full_key)
        if entry is None:
            return None
        record, expires_at = entry
        if expires_at <= time.monotonic():
            self._memory_store.pop(full_key, None)
            return None
        return record

    def _handle_redis_error(self, e):
        """Log error and switch flag to False to stop trying Redis."""
        logger.error("❌ Redis Error: %s. Switching to RAM mode.", e)
        self.redis_available = False
