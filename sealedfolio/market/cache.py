"""Staleness-gated cache of catalog product details.

Entries are keyed by catalog id and stamped with their fetch time. An
entry is fresh while younger than the cooldown window (30 minutes);
stale entries are superseded by the next fetch. The cache never evicts
by size.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sealedfolio.config import COOLDOWN_MS
from sealedfolio.models import CacheEntry, now_ms

logger = logging.getLogger(__name__)

PersistFn = Callable[[dict[str, CacheEntry]], None]


class StalenessCache:
    """Keyed store of fetched catalog records.

    Args:
        entries: Initial entries, e.g. as loaded from the store.
        max_age_ms: Freshness window in milliseconds.
        clock: Callable returning the current epoch ms.
        persist: Called with all entries after every ``put``.

    """

    def __init__(
        self,
        entries: Mapping[str, CacheEntry] | None = None,
        *,
        max_age_ms: int = COOLDOWN_MS,
        clock: Callable[[], int] = now_ms,
        persist: PersistFn | None = None,
    ) -> None:
        self._entries: dict[str, CacheEntry] = dict(entries or {})
        self.max_age_ms = max_age_ms
        self._clock = clock
        self._persist = persist

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return str(key) in self._entries

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(str(key))

    def put(self, key: str, data: Any) -> CacheEntry:
        """Store ``data`` under ``key`` stamped with the current time."""
        entry = CacheEntry(data=data, fetched_at=self._clock())
        self._entries[str(key)] = entry
        if self._persist is not None:
            self._persist(self.entries())
        return entry

    def is_fresh(self, entry: CacheEntry | None) -> bool:
        """True while ``entry`` is younger than the freshness window."""
        if entry is None:
            return False
        return self._clock() - entry.fetched_at < self.max_age_ms

    def get_fresh(self, key: str) -> Any:
        """Return the cached record for ``key`` if fresh, else None."""
        entry = self.get(key)
        if self.is_fresh(entry):
            logger.debug("Cache hit for %s", key)
            return entry.data if entry is not None else None
        return None

    def entries(self) -> dict[str, CacheEntry]:
        """Snapshot of all entries."""
        return dict(self._entries)
