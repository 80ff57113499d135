# recipe_wheel/services/cache.py
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from recipe_wheel.core import config

log = logging.getLogger("recipe_wheel.cache")

CacheKey = Tuple[str, str]


def _freeze(params: Optional[Dict[str, Any]]) -> str:
    # canonical form so {"a": 1, "b": 2} and {"b": 2, "a": 1} share a key
    return json.dumps(params or {}, sort_keys=True, default=str)


@dataclass
class _Entry:
    value: Any
    stored_at: float
    stale: bool = False


class QueryCache:
    """
    Last-known value per (kind, params), plus a staleness flag.
    Mutations mark dependent keys stale, and entries older than `max_age_s`
    count as stale too; readers re-fetch stale keys on next access.
    Expired entries are dropped whenever a new value is stored.
    """

    def __init__(
        self,
        max_age_s: float = config.CACHE_MAX_AGE_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_age_s = max_age_s
        self.clock = clock
        self._entries: Dict[CacheKey, _Entry] = {}

    def key(self, kind: str, params: Optional[Dict[str, Any]] = None) -> CacheKey:
        return (kind, _freeze(params))

    def _expired(self, entry: _Entry) -> bool:
        return self.clock() - entry.stored_at >= self.max_age_s

    def _usable(self, entry: Optional[_Entry]) -> bool:
        return entry is not None and not entry.stale and not self._expired(entry)

    def _store(self, k: CacheKey, value: Any) -> None:
        expired = [key for key, entry in self._entries.items() if self._expired(entry)]
        for key in expired:
            del self._entries[key]
        self._entries[k] = _Entry(value, stored_at=self.clock())

    def peek(self, kind: str, params: Optional[Dict[str, Any]] = None) -> Any:
        entry = self._entries.get(self.key(kind, params))
        return entry.value if entry else None

    def is_fresh(self, kind: str, params: Optional[Dict[str, Any]] = None) -> bool:
        return self._usable(self._entries.get(self.key(kind, params)))

    def set(self, kind: str, params: Optional[Dict[str, Any]], value: Any) -> None:
        self._store(self.key(kind, params), value)

    async def get_or_fetch(
        self,
        kind: str,
        params: Optional[Dict[str, Any]],
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        k = self.key(kind, params)
        entry = self._entries.get(k)
        if self._usable(entry):
            return entry.value

        # failures propagate and leave the previous entry as it was
        value = await fetch()
        self._store(k, value)
        return value

    def invalidate(self, kind: str, params: Optional[Dict[str, Any]] = None) -> int:
        """Mark one key, or every key of `kind` when params is None, stale."""
        if params is not None:
            targets = [self.key(kind, params)]
        else:
            targets = [k for k in self._entries if k[0] == kind]

        marked = 0
        for k in targets:
            entry = self._entries.get(k)
            if entry is not None and not entry.stale:
                entry.stale = True
                marked += 1

        log.debug("cache invalidated", extra={"kind": kind, "marked": marked})
        return marked

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
