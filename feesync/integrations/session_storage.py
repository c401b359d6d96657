"""Redis-backed session key/value storage with TTL and in-memory fallback."""
from __future__ import annotations

import logging
import time

import redis

logger = logging.getLogger(__name__)


class RedisSessionStorage:
    """Per-session string storage persisted in Redis, refreshed on every write."""

    KEY_PREFIX = "fee_session"

    def __init__(
        self,
        session_id: str,
        redis_url: str | None = None,
        ttl_seconds: int = 24 * 60 * 60,
    ):
        self.session_id = session_id
        self.ttl_seconds = ttl_seconds
        self._redis_url = redis_url
        self._client = self._init_client()
        self._memory: dict[str, str] = {}
        self._memory_last_access: float = time.time()

    def _init_client(self):
        if not self._redis_url:
            logger.info("REDIS_URL is not set; session storage uses in-memory mode")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis session storage enabled")
            return client
        except redis.RedisError as exc:
            logger.warning("Redis session init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis session fallback to memory mode: %s", reason)
        self._client = None

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{self.session_id}:{key}"

    def _memory_expired(self) -> bool:
        return time.time() - self._memory_last_access > self.ttl_seconds

    def _memory_touch(self) -> None:
        if self._memory_expired():
            self._memory.clear()
        self._memory_last_access = time.time()

    @property
    def uses_redis(self) -> bool:
        return self._client is not None

    def get_item(self, key: str) -> str | None:
        if self._client:
            try:
                return self._client.get(self._key(key))
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_touch()
        return self._memory.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._client:
            try:
                self._client.setex(self._key(key), self.ttl_seconds, value)
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_touch()
        self._memory[key] = value

    def remove_item(self, key: str) -> None:
        if self._client:
            try:
                self._client.delete(self._key(key))
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._memory_touch()
        self._memory.pop(key, None)
