"""Time-expiring caches shared by the AI features."""

import hashlib
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

SHORT_TTL_SECONDS = 300
MEDIUM_TTL_SECONDS = 3600
LONG_TTL_SECONDS = 86400


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a value, using the cache default TTL when none is given."""

    def delete(self, key: str) -> None:
        """Remove a value if present."""

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""

    def clear(self) -> None:
        """Drop every entry."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache with lazy expiry on read."""

    default_ttl_seconds: int = MEDIUM_TTL_SECONDS
    clock: Callable[[], datetime] = _utcnow
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, repr=False)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() > entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value, replacing any existing entry."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = self.clock() + timedelta(seconds=ttl)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        """Remove a cached value."""
        self._entries.pop(key, None)

    def cleanup(self) -> int:
        """Remove all expired entries."""
        now = self.clock()
        expired = [
            key for key, entry in self._entries.items() if now > entry.expires_at
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class CacheTiers:
    """The short, medium and long lived caches used across the features."""

    short: Cache
    medium: Cache
    long: Cache

    @classmethod
    def create(cls, clock: Callable[[], datetime] = _utcnow) -> "CacheTiers":
        """Create in-memory tiers with the default TTLs."""
        return cls(
            short=InMemoryCache(default_ttl_seconds=SHORT_TTL_SECONDS, clock=clock),
            medium=InMemoryCache(default_ttl_seconds=MEDIUM_TTL_SECONDS, clock=clock),
            long=InMemoryCache(default_ttl_seconds=LONG_TTL_SECONDS, clock=clock),
        )

    def cleanup(self) -> int:
        """Sweep expired entries from every tier."""
        return self.short.cleanup() + self.medium.cleanup() + self.long.cleanup()

    def clear(self) -> None:
        """Empty every tier."""
        self.short.clear()
        self.medium.clear()
        self.long.clear()


def hash_key(*parts: str) -> str:
    """Return a content-addressed key for the given text parts."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()
