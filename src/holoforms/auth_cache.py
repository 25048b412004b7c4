"""AuthCache — short-lived memo of authorization lookups.

Owner-side routes check "does user U own form F" on every request.  The
answer rarely changes, so it is cached for ``AUTH_CACHE_TTL_SECONDS``
(24 hours by default).  The cache is injected where it is needed, never
a module global, so tests can swap in a fresh one with a fake clock.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from holoforms.constants import AUTH_CACHE_TTL_SECONDS


@dataclass(frozen=True)
class CachedPrincipal:
    principal: Any
    # Clock time (seconds) after which the entry is stale
    expires_at: float


class AuthCache(ABC):
    @abstractmethod
    def get(self, key: str) -> CachedPrincipal | None:
        """Return the cached entry for ``key``, or None if missing or stale."""

    @abstractmethod
    def put(self, key: str, principal: Any) -> CachedPrincipal:
        """Cache ``principal`` under ``key`` and return the entry."""

    @abstractmethod
    def invalidate(self, key: str) -> None:
        """Drop ``key`` if present."""


class InMemoryAuthCache(AuthCache):
    """Process-local dict cache with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: int = AUTH_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedPrincipal] = {}

    def get(self, key: str) -> CachedPrincipal | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, principal: Any) -> CachedPrincipal:
        entry = CachedPrincipal(principal=principal, expires_at=self._clock() + self._ttl)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
