"""
FastAPI application for the wallet vault.

Wires the wallet store, the key generator handle and the balance scheduler
into one process. The key generator and the balance subsystem fail
independently: if the key generator cannot start, wallet creation answers
503 while balances keep refreshing.

Usage:
    wallet-vault
"""

import sys
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from loguru import logger

from core.balances.fetcher import BalanceFetcher
from core.balances.scheduler import BalanceScheduler
from core.errors import InitializationFailed
from core.paths import LOG_LEVEL
from core.wallet.keys import KeyGenerator
from core.wallet.manager import WalletManager
from core.wallet.storage import WalletStorage
from server.routers import balance, wallets


def configure_logging(level: str = LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def create_app(
    storage: WalletStorage | None = None,
    fetcher: BalanceFetcher | None = None,
    key_generator_factory: Callable[[], KeyGenerator] = KeyGenerator.initialize,
    start_scheduler: bool = True,
) -> FastAPI:
    """
    Build the application.

    Args:
        storage: Wallet store (defaults to WALLETS_PATH).
        fetcher: Balance fetcher (defaults to the configured relay).
        key_generator_factory: Returns a ready KeyGenerator or raises InitializationFailed.
        start_scheduler: Subscribe the scheduler to the store on startup.
    """
    storage = storage or WalletStorage()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            keys = key_generator_factory()
        except InitializationFailed as e:
            logger.error(f"Wallet creation disabled: {e}")
            keys = None

        scheduler = BalanceScheduler(fetcher or BalanceFetcher())
        app.state.wallet_manager = WalletManager(storage, keys)
        app.state.balance_scheduler = scheduler

        if start_scheduler:
            scheduler.subscribe(storage.list_all)

        try:
            yield
        finally:
            scheduler.close()
            if keys is not None:
                keys.close()

    app = FastAPI(title="Wallet Vault", lifespan=lifespan)
    app.include_router(balance.router, prefix="/api", tags=["balance"])
    app.include_router(wallets.router, prefix="/api", tags=["wallets"])
    return app


def main() -> None:
    import uvicorn

    configure_logging()
    uvicorn.run(create_app(), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
