"""Cached, rate-limited native balance aggregation."""

from core.balances.cache import BalanceCache, CacheEntry
from core.balances.fetcher import BalanceFetcher, BalanceView, format_balance
from core.balances.scheduler import (
    BalanceScheduler,
    BalanceUpdate,
    SubscriptionHandle,
    UpdateStatus,
    WalletBalanceState,
)

__all__ = [
    "BalanceCache",
    "CacheEntry",
    "BalanceFetcher",
    "BalanceView",
    "format_balance",
    "BalanceScheduler",
    "BalanceUpdate",
    "SubscriptionHandle",
    "UpdateStatus",
    "WalletBalanceState",
]
