from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from redis import Redis
from redis.exceptions import RedisError

from synapse.exceptions import StoreError

logger = logging.getLogger("synapse.verification")


class KeyValueStore(Protocol):
    """
    Expiring key/value storage for short-lived verification state.

    Values are JSON-compatible. ``ttl`` is in seconds; ``None`` keeps the
    value until deleted.
    """

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None: ...

    def get(self, key: str) -> Any | None: ...

    def delete(self, key: str) -> None: ...

    def increment(self, key: str, ttl: Optional[float] = None) -> int:
        """
        Atomically adds one to an integer counter and returns the new value.

        A missing counter starts at zero and takes ``ttl``; an existing one
        keeps its expiry.
        """
        ...


class InMemoryStore:
    """
    Process-local store.

    Expired entries are dropped on access and by ``sweep()``. Contents do
    not survive restarts and are not shared between instances.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._items: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            self._items[key] = (value, expires_at)

    def get(self, key: str) -> Any | None:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and expires_at <= self._clock():
                del self._items[key]
                return None
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def increment(self, key: str, ttl: Optional[float] = None) -> int:
        now = self._clock()
        with self._lock:
            item = self._items.get(key)
            if item is None or (item[1] is not None and item[1] <= now):
                expires_at = now + ttl if ttl is not None else None
                count = 1
            else:
                expires_at = item[1]
                count = int(item[0]) + 1
            self._items[key] = (count, expires_at)
            return count

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                k for k, (_, expires_at) in self._items.items()
                if expires_at is not None and expires_at <= now
            ]
            for k in expired:
                del self._items[k]
        if expired:
            logger.debug("Swept %d expired entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def _expiry_seconds(ttl: Optional[float]) -> Optional[int]:
    # Redis rejects non-positive expiry; round up to a whole second.
    return max(1, int(ttl + 0.999)) if ttl is not None else None


class RedisStore:
    """
    Redis-backed store; expiry is delegated to Redis.
    """

    def __init__(self, client: Redis, *, prefix: str = "synapse:") -> None:
        self.client = client
        self.prefix = prefix

    @staticmethod
    def from_url(url: str, *, prefix: str = "synapse:") -> "RedisStore":
        return RedisStore(Redis.from_url(url), prefix=prefix)

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ex = _expiry_seconds(ttl)
        try:
            self.client.set(self.prefix + key, json.dumps(value), ex=ex)
        except RedisError as exc:
            raise StoreError(f"Failed to write {key}") from exc

    def get(self, key: str) -> Any | None:
        try:
            raw = self.client.get(self.prefix + key)
        except RedisError as exc:
            raise StoreError(f"Failed to read {key}") from exc
        if raw is None:
            return None
        return json.loads(raw)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self.prefix + key)
        except RedisError as exc:
            raise StoreError(f"Failed to delete {key}") from exc

    def increment(self, key: str, ttl: Optional[float] = None) -> int:
        # SET NX seeds the counter with its expiry; INCR keeps the TTL.
        ex = _expiry_seconds(ttl)
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.set(self.prefix + key, 0, ex=ex, nx=True)
                pipe.incr(self.prefix + key)
                _, count = pipe.execute()
        except RedisError as exc:
            raise StoreError(f"Failed to increment {key}") from exc
        return int(count)
