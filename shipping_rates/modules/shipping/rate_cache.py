"""
Rate Quote Cache

Minimizes redundant carrier calls: a fetched RateQuoteResult is stored under
a deterministic fingerprint of the package and the weight-related config.

- Cache key: MD5 hash of the normalized package content + config
- InMemoryRateCache: LRU with optional TTL, single process
- RedisRateCache: shared across instances through redis.asyncio

Usage:
    cache = create_rate_cache(settings)

    key = make_cache_key(package, config)
    cached = await cache.get(key)
    if cached is None:
        result = await carrier.find_rates(package, config)
        await cache.put(key, result)
"""
import hashlib
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from shipping_rates.core.config import Settings, ShippingConfig
from shipping_rates.modules.shipping.models import PackageDescriptor, RateQuoteResult

logger = logging.getLogger(__name__)


def _normalize_decimal(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    # 1, 1.0 and 1.00 must fingerprint identically
    return format(value.normalize(), "f")


def make_cache_key(package: PackageDescriptor, config: ShippingConfig) -> str:
    """
    Generate the cache key for a package under a configuration.

    Pure function of the package content and the weight-related config:
    no time, locale or carrier identity goes into the key. Fields are
    JSON-encoded, so text containing separators cannot run into a
    neighbouring field.

    Returns:
        MD5 hex digest of the canonical package description
    """
    key_parts = [
        package.origin.fingerprint(),
        package.destination.fingerprint(),
        [
            [_normalize_decimal(item.weight), item.quantity, item.sku]
            for item in package.items
        ],
        package.units.value,
        config.units.value,
        _normalize_decimal(config.unit_weight_multiplier),
        _normalize_decimal(config.default_item_weight),
    ]
    key_string = json.dumps(key_parts, separators=(",", ":"))
    return hashlib.md5(key_string.encode()).hexdigest()


class RateCache(ABC):
    """Key/value store of fetched rate sets."""

    @abstractmethod
    async def get(self, key: str) -> Optional[RateQuoteResult]:
        """Return the cached result or None on a miss."""

    @abstractmethod
    async def put(self, key: str, result: RateQuoteResult) -> None:
        """Store a result under key, replacing any previous entry."""

    @abstractmethod
    async def evict(self, key: str) -> bool:
        """Remove key. Returns True if an entry was removed."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""


class InMemoryRateCache(RateCache):
    """
    LRU cache with optional TTL for carrier rate sets.

    All operations take an internal lock, so concurrent requests (coroutines
    or threads) never observe a partially written entry.

    Attributes:
        ttl_seconds: Time-to-live for entries (0 = never expire)
        max_size: Maximum entries before LRU eviction
    """

    def __init__(
        self,
        ttl_seconds: int = 0,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._cache: "OrderedDict[str, Tuple[float, RateQuoteResult]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._cache)

    def _is_expired(self, stored_at: float) -> bool:
        return self.ttl_seconds > 0 and self._clock() - stored_at > self.ttl_seconds

    async def get(self, key: str) -> Optional[RateQuoteResult]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            stored_at, result = entry
            if self._is_expired(stored_at):
                del self._cache[key]
                self._misses += 1
                logger.debug(f"[RATE_CACHE] Expired: {key}")
                return None

            self._cache.move_to_end(key)
            self._hits += 1
        logger.debug(f"[RATE_CACHE] Hit: {key} ({len(result.rates)} rates)")
        return result

    async def put(self, key: str, result: RateQuoteResult) -> None:
        with self._lock:
            if key in self._cache:
                del self._cache[key]
            while len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug("[RATE_CACHE] Evicted oldest entry (capacity)")
            self._cache[key] = (self._clock(), result)
        logger.debug(f"[RATE_CACHE] Stored: {key} ({len(result.rates)} rates)")

    async def evict(self, key: str) -> bool:
        with self._lock:
            removed = self._cache.pop(key, None) is not None
        if removed:
            logger.debug(f"[RATE_CACHE] Invalidated: {key}")
        return removed

    async def clear(self) -> None:
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(f"[RATE_CACHE] Cleared {count} entries")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with hits, misses, hit_rate, size, etc.
        """
        with self._lock:
            total = self._hits + self._misses
            return {
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total, 4) if total > 0 else 0.0,
                "size": len(self._cache),
                "max_size": self.max_size,
                "ttl_seconds": self.ttl_seconds,
                "evictions": self._evictions,
            }

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0


class RedisRateCache(RateCache):
    """
    Redis-backed rate cache shared across instances.

    Falls back gracefully: a Redis failure on read is treated as a miss and a
    failed write only costs a future re-fetch.
    """

    def __init__(self, client: redis.Redis, prefix: str = "rates:", ttl_seconds: int = 0):
        self._client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    def _redis_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[RateQuoteResult]:
        try:
            data = await self._client.get(self._redis_key(key))
        except RedisError as e:
            logger.warning(f"[RATE_CACHE] Redis get failed for {key}: {e}")
            return None

        if data is None:
            return None

        try:
            return RateQuoteResult.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"[RATE_CACHE] Discarding unreadable entry {key}: {e}")
            await self.evict(key)
            return None

    async def put(self, key: str, result: RateQuoteResult) -> None:
        """
        Store result as JSON.

        Results whose raw_params would not come back unchanged (Decimals,
        tuples, other non-JSON values) are not cached, so a Redis hit never
        differs from a fresh carrier response.
        """
        data = result.to_dict()
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"[RATE_CACHE] Not caching {key}, raw_params are not JSON-serializable: {e}")
            return
        if json.loads(payload) != data:
            logger.warning(f"[RATE_CACHE] Not caching {key}, raw_params would not survive a JSON round-trip")
            return

        try:
            if self.ttl_seconds > 0:
                await self._client.set(self._redis_key(key), payload, ex=self.ttl_seconds)
            else:
                await self._client.set(self._redis_key(key), payload)
        except RedisError as e:
            logger.warning(f"[RATE_CACHE] Redis put failed for {key}: {e}")

    async def evict(self, key: str) -> bool:
        try:
            return await self._client.delete(self._redis_key(key)) > 0
        except RedisError as e:
            logger.warning(f"[RATE_CACHE] Redis evict failed for {key}: {e}")
            return False

    async def clear(self) -> None:
        count = 0
        async for redis_key in self._client.scan_iter(match=f"{self.prefix}*"):
            await self._client.delete(redis_key)
            count += 1
        logger.info(f"[RATE_CACHE] Cleared {count} Redis entries")

    async def close(self) -> None:
        await self._client.aclose()


def create_rate_cache(settings: Settings) -> RateCache:
    """Redis-backed cache when REDIS_URL is configured, in-memory otherwise."""
    if settings.REDIS_URL:
        client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        logger.info("[RATE_CACHE] Using Redis rate cache")
        return RedisRateCache(
            client,
            prefix=settings.RATE_CACHE_PREFIX,
            ttl_seconds=settings.RATE_CACHE_TTL_SECONDS,
        )
    return InMemoryRateCache(
        ttl_seconds=settings.RATE_CACHE_TTL_SECONDS,
        max_size=settings.RATE_CACHE_MAX_SIZE,
    )
