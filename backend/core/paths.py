"""Shared path constants, URLs and timing settings for the backend."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Backend root (the directory holding core/ and server/)
BACKEND_ROOT = Path(__file__).parent.parent

# Project root (parent of backend/, where pyproject.toml lives)
PROJECT_ROOT = BACKEND_ROOT.parent

load_dotenv(PROJECT_ROOT / ".env")

# Data directory (at project root unless overridden)
DATA_DIR = Path(os.getenv("VAULT_DATA_DIR", str(PROJECT_ROOT / "data")))
WALLETS_PATH = DATA_DIR / "wallets.json"

# =============================================================================
# External API URLs
# =============================================================================

# Balance relay (POST {address, networkId} -> {success, balance})
BALANCE_RELAY_URL = os.getenv("BALANCE_RELAY_URL", "http://127.0.0.1:8000/api/balance")

# Chain RPC nodes used by the relay
SEPOLIA_RPC_URL = os.getenv("SEPOLIA_RPC_URL", "https://sepolia.drpc.org")
BSC_TESTNET_RPC_URL = os.getenv("BSC_TESTNET_RPC_URL", "https://bsc-testnet.drpc.org")

# =============================================================================
# Balance Timing (seconds)
# =============================================================================

BALANCE_POLLING_INTERVAL = float(os.getenv("BALANCE_POLLING_INTERVAL", "120"))
BALANCE_CACHE_TTL = float(os.getenv("BALANCE_CACHE_TTL", "30"))
RATE_LIMIT_DELAY = float(os.getenv("RATE_LIMIT_DELAY", "0.5"))  # between requests of one wallet
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))

# =============================================================================
# Wallet Validation
# =============================================================================

MIN_PASSWORD_LENGTH = 8
MNEMONIC_WORD_COUNT = 12
MAX_WALLET_NAME_LENGTH = 50

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
