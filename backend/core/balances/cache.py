"""Time-bounded cache of last-known balances keyed by (address, network)."""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from core.paths import BALANCE_CACHE_TTL


@dataclass(frozen=True)
class CacheEntry:
    raw_balance: str  # decimal string of a non-negative integer
    observed_at: float  # epoch seconds


class BalanceCache:
    """
    TTL cache for raw balances.

    Stale entries read as absent but stay in the map until overwritten.
    No eviction: the key space is bounded by wallets x networks.
    """

    def __init__(
        self,
        ttl: float = BALANCE_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, address: str, network_id: str) -> CacheEntry | None:
        """Return the entry if it is still fresh, else None."""
        with self._lock:
            entry = self._entries.get((address, network_id))
        if entry is None:
            return None
        if self.clock() - entry.observed_at >= self.ttl:
            return None
        return entry

    def put(self, address: str, network_id: str, raw_balance: str) -> CacheEntry:
        entry = CacheEntry(raw_balance=raw_balance, observed_at=self.clock())
        with self._lock:
            self._entries[(address, network_id)] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
