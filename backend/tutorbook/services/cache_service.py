# backend/tutorbook/services/cache_service.py
"""
Cache Service for the Tutorbook platform

Injected into services that want to avoid re-reading slowly changing data
(weekly availability templates). Every entry carries a TTL. Redis is used
when settings.redis_url is configured; otherwise entries live in an
in-memory store with the same expiry contract.
"""

from datetime import date, datetime, time, timedelta
import fnmatch
import json
import logging
from typing import Any, Callable, Dict, Optional, Union

import redis
from redis import Redis
from redis.exceptions import RedisError

from ..core.config import settings
from .base import BaseService

logger = logging.getLogger(__name__)


class CacheKeyBuilder:
    """Standardized cache key generation."""

    # Key prefixes for different domains
    PREFIXES = {
        "availability": "avail",
        "slot": "slot",
        "tutor": "tutor",
    }

    @staticmethod
    def build(*parts: Union[str, int, date, time]) -> str:
        """
        Build a cache key from parts.

        Examples:
            build('availability', 'template', 'abc') -> 'avail:template:abc'
        """
        formatted_parts = []

        for part in parts:
            if isinstance(part, (date, datetime, time)):
                formatted_parts.append(part.isoformat())
            else:
                formatted_parts.append(str(part))

        if parts:
            first = parts[0]
            if isinstance(first, str) and first in CacheKeyBuilder.PREFIXES:
                formatted_parts[0] = CacheKeyBuilder.PREFIXES[first]

        return ":".join(formatted_parts)


class CacheService(BaseService):
    """
    Key/value cache with per-entry TTL.

    Values must be JSON serializable; both backends hand back a fresh
    deserialized copy, so callers never share mutable cached objects.
    """

    # TTL Tiers (in seconds)
    TTL_TIERS = {
        "hot": 300,  # 5 minutes - frequently accessed
        "warm": 3600,  # 1 hour - moderate access
        "cold": 86400,  # 24 hours - infrequent access
    }

    def __init__(
        self,
        redis_client: Optional[Redis] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.redis: Optional[Redis] = redis_client
        self._now = now or datetime.now

        # In-memory fallback
        self._memory_cache: Dict[str, str] = {}
        self._memory_expiry: Dict[str, datetime] = {}

        self._stats: Dict[str, int] = self._initialize_stats()

    @classmethod
    def from_settings(cls) -> "CacheService":
        """Build a cache from settings, falling back to memory when Redis is unreachable."""
        if not settings.redis_url:
            logger.info("REDIS_URL not set, using in-memory cache")
            return cls()
        try:
            client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                health_check_interval=30,
            )
            client.ping()
            logger.info("Connected to Redis")
            return cls(client)
        except (RedisError, ConnectionError) as e:
            logger.warning(f"Redis not available: {e}. Using in-memory fallback.")
            return cls()

    @property
    def backend(self) -> str:
        return "redis" if self.redis is not None else "memory"

    def _initialize_stats(self) -> Dict[str, int]:
        return {"hits": 0, "misses": 0, "sets": 0, "deletes": 0, "errors": 0}

    def _resolve_ttl(self, ttl: Optional[int], tier: str) -> int:
        if ttl is None:
            return self.TTL_TIERS.get(tier, self.TTL_TIERS["warm"])
        return ttl

    # Core Cache Operations

    @BaseService.measure_operation("cache_get")
    def get(self, key: str) -> Optional[Any]:
        """Get a value, or None when missing or expired."""
        try:
            if self.redis is not None:
                raw = self.redis.get(key)
            else:
                raw = self._memory_cache.get(key)
                expires_at = self._memory_expiry.get(key)
                if raw is not None and expires_at is not None and self._now() >= expires_at:
                    self._memory_cache.pop(key, None)
                    self._memory_expiry.pop(key, None)
                    raw = None

            if raw is None:
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return json.loads(raw)

        except RedisError as e:
            logger.error(f"Cache get error for key {key}: {e}")
            self._stats["errors"] += 1
            return None

    @BaseService.measure_operation("cache_set")
    def set(self, key: str, value: Any, ttl: Optional[int] = None, tier: str = "hot") -> bool:
        """
        Store a value for ttl seconds (or the tier's TTL).

        A TTL of zero or less stores nothing.
        """
        ttl = self._resolve_ttl(ttl, tier)
        if ttl <= 0:
            return False
        serialized = json.dumps(value, default=str)
        try:
            if self.redis is not None:
                self.redis.setex(key, ttl, serialized)
            else:
                self._memory_cache[key] = serialized
                self._memory_expiry[key] = self._now() + timedelta(seconds=ttl)
            self._stats["sets"] += 1
            return True

        except RedisError as e:
            logger.error(f"Cache set error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete")
    def delete(self, key: str) -> bool:
        """Delete a key; True when something was removed."""
        try:
            if self.redis is not None:
                removed = bool(self.redis.delete(key))
            else:
                removed = self._memory_cache.pop(key, None) is not None
                self._memory_expiry.pop(key, None)
            if removed:
                self._stats["deletes"] += 1
            return removed

        except RedisError as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete_pattern")
    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern."""
        count = 0
        try:
            if self.redis is not None:
                for key in self.redis.scan_iter(match=pattern):
                    if self.redis.delete(key):
                        count += 1
            else:
                for key in [k for k in list(self._memory_cache) if fnmatch.fnmatch(k, pattern)]:
                    self._memory_cache.pop(key, None)
                    self._memory_expiry.pop(key, None)
                    count += 1

            self._stats["deletes"] += count
            logger.info(f"Deleted {count} keys matching pattern: {pattern}")
            return count

        except RedisError as e:
            logger.error(f"Cache delete pattern error: {e}")
            self._stats["errors"] += 1
            return 0

    def clear(self) -> None:
        """Drop every in-memory entry (Redis entries expire on their own)."""
        self._memory_cache.clear()
        self._memory_expiry.clear()

    # Monitoring

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self._stats["hits"] + self._stats["misses"]
        hit_rate = (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0
        return {
            **self._stats,
            "backend": self.backend,
            "hit_rate": f"{hit_rate:.2f}%",
            "total_requests": total_requests,
        }

    def reset_stats(self) -> None:
        self._stats = self._initialize_stats()
