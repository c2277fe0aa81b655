import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from redis import Redis
from redis.exceptions import RedisError

from storefront.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class CacheResult:
    hit: bool
    value: Any | None = None


MISS = CacheResult(hit=False)


class CacheClient:
    """JSON read-through cache for storefront payloads.

    Uses Redis when it answers a ping at construction time. Otherwise, and for
    any Redis call that fails later, entries live in a per-process dict that
    honours the same TTLs. Keys carry the cache schema version so a deploy that
    changes payload shapes never reads stale documents.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.enabled = self.settings.cache_enabled
        self._local: dict[str, tuple[float, str]] = {}
        self._redis: Redis | None = self._connect() if self.enabled else None

    def _connect(self) -> Redis | None:
        try:
            client = Redis.from_url(self.settings.redis_url, decode_responses=True)
            client.ping()
        except RedisError as exc:
            logger.warning("Redis unavailable at %s, using in-process cache: %s", self.settings.redis_url, exc)
            return None
        return client

    def key(self, namespace: str, digest: str) -> str:
        return f"{namespace}:{digest}:v:{self.settings.cache_schema_version}"

    def get_json(self, key: str) -> CacheResult:
        if not self.enabled:
            return MISS
        raw = self._read(key)
        if raw is None:
            return MISS
        return CacheResult(hit=True, value=json.loads(raw))

    def set_json(self, key: str, payload: Any, ttl_seconds: int) -> None:
        if not self.enabled or ttl_seconds <= 0:
            return
        self._write(key, json.dumps(payload, default=str), ttl_seconds)

    def _read(self, key: str) -> str | None:
        if self._redis is not None:
            try:
                return self._redis.get(key)
            except RedisError as exc:
                logger.debug("Redis get failed for %s: %s", key, exc)
        entry = self._local.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at <= time.monotonic():
            self._local.pop(key, None)
            return None
        return raw

    def _write(self, key: str, raw: str, ttl_seconds: int) -> None:
        if self._redis is not None:
            try:
                self._redis.setex(key, ttl_seconds, raw)
                return
            except RedisError as exc:
                logger.debug("Redis set failed for %s: %s", key, exc)
        self._local[key] = (time.monotonic() + ttl_seconds, raw)


cache_client = CacheClient()
