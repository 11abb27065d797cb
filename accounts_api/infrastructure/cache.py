# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

import redis

from accounts_api.domain.users.repositories import CachedValue, TokenCache
from accounts_api.shared.errors.base import ServiceUnavailableError
from accounts_api.shared.logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True)
class CacheEntry(Generic[V]):  # noqa: UP046
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryTTLCache(Generic[K, V]):  # noqa: UP046
    """Thread-safe dict with per-key expiry, checked lazily on access."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = Lock()
        self._store: dict[K, CacheEntry[V]] = {}

    def set(self, key: K, value: V, ttl_seconds: float) -> None:
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._live_entry(key)

    def pop_with_ttl(self, key: K) -> tuple[V, float] | None:
        with self._lock:
            entry = self._store.pop(key, None)
            if entry is None:
                return None
            now = self._clock()
            if entry.is_expired(now):
                return None
            return entry.value, entry.expires_at - now

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._store.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _live_entry(self, key: K) -> V | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry.value


class InMemoryTokenCache(TokenCache):
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._cache: InMemoryTTLCache[str, str] = InMemoryTTLCache(clock)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._cache.set(key, value, ttl_seconds)
        logger.debug(f"cache: set key={key} ttl={ttl_seconds}")

    def get(self, key: str) -> str | None:
        return self._cache.get(key)

    def delete(self, key: str) -> None:
        self._cache.invalidate(key)
        logger.debug(f"cache: delete key={key}")

    def take(self, key: str) -> CachedValue | None:
        popped = self._cache.pop_with_ttl(key)
        logger.debug(f"cache: take key={key} hit={popped is not None}")
        if popped is None:
            return None
        value, remaining = popped
        return CachedValue(value=value, ttl_seconds=max(1, math.ceil(remaining)))


class RedisTokenCache(TokenCache):
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except redis.exceptions.ConnectionError as exc:
            raise ServiceUnavailableError("redis") from exc

    def get(self, key: str) -> str | None:
        try:
            return _decode(self._client.get(key))
        except redis.exceptions.ConnectionError as exc:
            raise ServiceUnavailableError("redis") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.exceptions.ConnectionError as exc:
            raise ServiceUnavailableError("redis") from exc

    def take(self, key: str) -> CachedValue | None:
        # MULTI/EXEC: GET, TTL and DEL run back to back with nothing in between.
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.get(key)
            pipe.ttl(key)
            pipe.delete(key)
            value, ttl, _deleted = pipe.execute()
        except redis.exceptions.ConnectionError as exc:
            raise ServiceUnavailableError("redis") from exc
        decoded = _decode(value)
        if decoded is None:
            return None
        # -1 means the key had no expiry; keys are always written with one.
        return CachedValue(value=decoded, ttl_seconds=max(int(ttl), 0))


def _decode(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


__all__ = ["InMemoryTTLCache", "InMemoryTokenCache", "RedisTokenCache"]
