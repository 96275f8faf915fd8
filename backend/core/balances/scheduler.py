"""
Periodic, rate-limited balance refresh across all tracked wallets.

Each subscription runs one fan-out pass immediately and then one every
`interval` seconds. A pass publishes, per wallet:

    pending -> fulfilled (balances, per-network errors inside)
            -> rejected  (unexpected failure for that wallet only)

Wallets are refreshed concurrently; the networks of a single wallet are
fetched one after another with a pacing delay in between.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from loguru import logger

from core.balances.fetcher import BalanceFetcher, BalanceView
from core.networks import NetworkDescriptor, get_all_networks
from core.paths import BALANCE_POLLING_INTERVAL, RATE_LIMIT_DELAY
from core.wallet.storage import SecretRecord

# =============================================================================
# DATA MODELS
# =============================================================================


class UpdateStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass
class WalletBalanceState:
    """Latest known balances of one wallet."""

    balances: list[BalanceView] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "balances": [b.to_dict() for b in self.balances],
            "is_loading": self.is_loading,
            "error": self.error,
        }


@dataclass(frozen=True)
class BalanceUpdate:
    wallet_id: str
    status: UpdateStatus
    state: WalletBalanceState


WalletProvider = Callable[[], Iterable[SecretRecord]]
Listener = Callable[[BalanceUpdate], None]


@dataclass(eq=False)
class SubscriptionHandle:
    """Returned by subscribe(); pass it to cancel()."""

    id: int
    wallet_provider: WalletProvider
    listener: Listener | None = None
    active: bool = True
    task: asyncio.Task | None = None
    passes: set[asyncio.Task] = field(default_factory=set)
    pending: set[str] = field(default_factory=set)  # wallet ids awaiting a result


# =============================================================================
# BALANCE SCHEDULER
# =============================================================================


class BalanceScheduler:
    """Drives periodic fan-out passes and keeps the latest state per wallet."""

    def __init__(
        self,
        fetcher: BalanceFetcher,
        networks: list[NetworkDescriptor] | None = None,
        interval: float = BALANCE_POLLING_INTERVAL,
        pacing_delay: float = RATE_LIMIT_DELAY,
    ) -> None:
        self.fetcher = fetcher
        self.networks = networks if networks is not None else get_all_networks()
        self.interval = interval
        self.pacing_delay = pacing_delay
        self._states: dict[str, WalletBalanceState] = {}
        self._subscriptions: dict[int, SubscriptionHandle] = {}
        self._ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(
        self,
        wallet_provider: WalletProvider,
        listener: Listener | None = None,
    ) -> SubscriptionHandle:
        """
        Start periodic refresh for the wallets returned by wallet_provider.

        The provider is called again at every pass, so wallets created later
        are picked up. Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        handle = SubscriptionHandle(
            id=next(self._ids),
            wallet_provider=wallet_provider,
            listener=listener,
        )
        handle.task = loop.create_task(self._run(handle))
        self._subscriptions[handle.id] = handle

        logger.info(
            f"Balance subscription {handle.id} started "
            f"(interval={self.interval}s, pacing={self.pacing_delay}s)"
        )
        return handle

    def cancel(self, handle: SubscriptionHandle) -> None:
        """
        Stop future passes for this subscription.

        Passes already running are left to finish, but their results are
        no longer published.
        """
        if not handle.active:
            return

        handle.active = False
        if handle.task and not handle.task.done():
            handle.task.cancel()
        self._subscriptions.pop(handle.id, None)
        self._finalize_pending(handle)

        logger.info(f"Balance subscription {handle.id} cancelled")

    def _finalize_pending(self, handle: SubscriptionHandle) -> None:
        """Clear the loading flag of wallets whose result will never be published."""
        still_pending = set()
        for other in self._subscriptions.values():
            still_pending |= other.pending

        for wallet_id in handle.pending - still_pending:
            state = self._states.get(wallet_id)
            if state is not None and state.is_loading:
                self._states[wallet_id] = WalletBalanceState(
                    balances=state.balances, error="Refresh cancelled"
                )
        handle.pending.clear()

    def close(self) -> None:
        """Cancel every subscription."""
        for handle in list(self._subscriptions.values()):
            self.cancel(handle)

    async def _run(self, handle: SubscriptionHandle) -> None:
        while handle.active:
            pass_task = asyncio.create_task(self.run_pass(handle))
            handle.passes.add(pass_task)
            pass_task.add_done_callback(handle.passes.discard)

            await asyncio.sleep(self.interval)

    # -------------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------------

    async def run_pass(self, handle: SubscriptionHandle) -> None:
        """One fan-out pass over every wallet currently known to the handle."""
        try:
            wallets = list(handle.wallet_provider())
        except Exception as e:
            logger.error(f"Could not load wallets for balance refresh: {e}")
            return

        if not wallets:
            logger.debug("No wallets to refresh")
            return

        for wallet in wallets:
            self._publish(
                handle,
                BalanceUpdate(wallet.id, UpdateStatus.PENDING, WalletBalanceState(is_loading=True)),
            )

        await asyncio.gather(*(self._refresh_wallet(handle, w) for w in wallets))

        logger.info(f"Balance pass complete for {len(wallets)} wallet(s)")

    async def _refresh_wallet(self, handle: SubscriptionHandle, wallet: SecretRecord) -> None:
        try:
            balances = await self.fetcher.get_balances_for_wallet(
                wallet.public_addresses, self.networks, self.pacing_delay
            )
        except Exception as e:
            logger.error(f"Balance refresh failed for wallet {wallet.id}: {e}")
            state = WalletBalanceState(error=str(e) or "Failed to fetch balances")
            self._publish(handle, BalanceUpdate(wallet.id, UpdateStatus.REJECTED, state))
            return

        failed = sum(1 for b in balances if b.error)
        if failed:
            logger.warning(f"Wallet {wallet.id}: {failed}/{len(balances)} network(s) failed")

        state = WalletBalanceState(balances=balances)
        self._publish(handle, BalanceUpdate(wallet.id, UpdateStatus.FULFILLED, state))

    def _publish(self, handle: SubscriptionHandle, update: BalanceUpdate) -> None:
        if not handle.active:
            return

        self._states[update.wallet_id] = update.state
        if update.status is UpdateStatus.PENDING:
            handle.pending.add(update.wallet_id)
        else:
            handle.pending.discard(update.wallet_id)

        if handle.listener is None:
            return
        try:
            handle.listener(update)
        except Exception as e:
            logger.error(f"Balance listener failed for wallet {update.wallet_id}: {e}")

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def get_state(self, wallet_id: str) -> WalletBalanceState | None:
        return self._states.get(wallet_id)

    def states(self) -> dict[str, WalletBalanceState]:
        return dict(self._states)
