"""Key/value store with per-key expiry measured in epoch milliseconds."""

from __future__ import annotations

import time

from gizmos.redis.node import RedisNode, VariantNode


def now_ms() -> int:
    """Return the current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class Cache:
    """Maps keys to nodes; keys may carry an absolute expiry time."""

    def __init__(self) -> None:
        self._values: dict[str, RedisNode] = {}
        self._ttl: dict[str, int] = {}

    def exists(self, key: str) -> bool:
        return key in self._values

    def expired(self, key: str) -> bool:
        deadline = self._ttl.get(key)
        return deadline is not None and deadline < now_ms()

    def erase(self, key: str) -> None:
        self._ttl.pop(key, None)
        self._values.pop(key, None)

    def get(self, key: str) -> RedisNode:
        """Return the stored node, or a null node if absent or expired."""
        if self.expired(key):
            self.erase(key)
        return self._values.get(key, VariantNode(None))

    def set(self, key: str, value: RedisNode) -> None:
        self._values[key] = value

    def ttl(self, key: str) -> int:
        """Milliseconds left; -2 if missing or expired, -1 if it never expires."""
        if not self.exists(key) or self.expired(key):
            return -2
        deadline = self._ttl.get(key)
        if deadline is None:
            return -1
        return deadline - now_ms()

    def expire_in_seconds(self, key: str, seconds: int) -> None:
        self._ttl[key] = now_ms() + seconds * 1000

    def expire_in_millis(self, key: str, millis: int) -> None:
        self._ttl[key] = now_ms() + millis

    def expire_at_seconds(self, key: str, seconds_at: int) -> None:
        self._ttl[key] = seconds_at * 1000

    def expire_at_millis(self, key: str, millis_at: int) -> None:
        self._ttl[key] = millis_at

    def __len__(self) -> int:
        return len(self._values)