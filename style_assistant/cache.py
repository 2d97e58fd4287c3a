from __future__ import annotations

"""Inventory cache: one current snapshot with a fixed expiry over a pluggable store."""

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from .config import Settings
from .errors import UpstreamError
from .inventory import InventorySnapshot, default_snapshot, normalize

logger = logging.getLogger("style_assistant.cache")

INVENTORY_KEY = "current_inventory"


class CacheState(str, enum.Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class StoreEntry:
    value: Any
    expires_at: float


class SnapshotStore(Protocol):
    def get(self, key: str) -> Optional[StoreEntry]:
        ...

    def put(self, key: str, value: Any, ttl: int) -> None:
        ...

    def expire(self, key: str) -> None:
        ...


class MemorySnapshotStore:
    """In-process key/value store whose entries carry an absolute expiry.

    Expired entries stay readable so the cache can tell STALE from EMPTY.
    Writes replace the whole entry, so readers see either the old or the new value.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: Dict[str, StoreEntry] = {}

    def get(self, key: str) -> Optional[StoreEntry]:
        return self._entries.get(key)

    def put(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = StoreEntry(value=value, expires_at=self._clock() + ttl)

    def expire(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries[key] = StoreEntry(value=entry.value, expires_at=self._clock())


class InventoryCache:
    """Serve the current inventory snapshot, refreshing it from the feed when stale."""

    def __init__(
        self,
        feed: Any,
        settings: Settings,
        store: Optional[SnapshotStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Purpose: Wire the feed, store and expiry settings.
        Inputs/Outputs: Inputs are an object with fetch(), Settings, an optional
            store and clock; no return value.
        Side Effects / State: Creates a MemorySnapshotStore when none is given.
        Dependencies: Uses inventory.normalize and inventory.default_snapshot.
        Failure Modes: None at init.
        If Removed: Every chat request would hit the storefront feed.
        Testing Notes: Pass a fake clock shared with the store to drive expiry.
        """
        self._feed = feed
        self._settings = settings
        self._clock = clock
        self._store = store if store is not None else MemorySnapshotStore(clock)

    def state(self) -> CacheState:
        entry = self._store.get(INVENTORY_KEY)
        if entry is None:
            return CacheState.EMPTY
        if entry.expires_at <= self._clock():
            return CacheState.STALE
        return CacheState.FRESH

    def read(self) -> InventorySnapshot:
        """Purpose: Return the current snapshot, refreshing synchronously on a miss.
        Inputs/Outputs: No inputs; returns an InventorySnapshot (never raises).
        Side Effects / State: Triggers refresh() when the entry is EMPTY or STALE.
        Dependencies: Uses state() and refresh().
        Failure Modes: Feed failures resolve to the default snapshot inside refresh().
        If Removed: Routes cannot get inventory for prompts or product cards.
        Testing Notes: A FRESH read must return the stored object unchanged.
        """
        entry = self._store.get(INVENTORY_KEY)
        if entry is not None and entry.expires_at > self._clock():
            return entry.value
        logger.info("inventory cache miss state=%s", self.state().value)
        return self.refresh()

    def refresh(self) -> InventorySnapshot:
        """Purpose: Run one refresh cycle: fetch, normalize, store.
        Inputs/Outputs: No inputs; returns the snapshot that was stored.
        Side Effects / State: One feed request; replaces the stored entry with a new TTL.
        Dependencies: Uses the feed client, normalize and default_snapshot.
        Failure Modes: Any error from the feed or normalize stores the default
            snapshot instead; UpstreamError logs a warning, anything else a traceback.
        If Removed: The scheduler has nothing to run and the cache never fills.
        Testing Notes: Make the feed raise NetworkError and expect the default snapshot.
        """
        settings = self._settings
        try:
            raw_products = self._feed.fetch()
            snapshot = normalize(raw_products, settings.store_url, settings.currency_symbol)
        except UpstreamError as exc:
            logger.warning("inventory refresh failed, serving default snapshot: %s", exc)
            snapshot = default_snapshot(settings.store_url)
        except Exception:
            logger.exception("inventory refresh crashed, serving default snapshot")
            snapshot = default_snapshot(settings.store_url)
        else:
            logger.info(
                "inventory refreshed products=%d sold_out=%d",
                len(snapshot.products),
                len(snapshot.sold_out),
            )
        self._store.put(INVENTORY_KEY, snapshot, settings.cache_ttl_seconds)
        return snapshot

    def expire(self) -> None:
        self._store.expire(INVENTORY_KEY)
