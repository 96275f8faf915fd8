"""API routers."""

from server.routers import (
    balance as balance,
    wallets as wallets,
)
