"""
HD wallet key generation behind an explicit, caller-owned handle.

Usage:
    keys = KeyGenerator.initialize()
    mnemonic = keys.generate_mnemonic()
    address = keys.derive_address(mnemonic, "ethereum")
    keys.close()
"""

from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger

from core.errors import InitializationFailed
from core.paths import MNEMONIC_WORD_COUNT

# BNB Smart Chain shares the Ethereum coin type (60)
DERIVATION_PATHS: dict[str, str] = {
    "ethereum": "m/44'/60'/0'/0/0",
    "bnbchain": "m/44'/60'/0'/0/0",
}


class KeyGenerator:
    """Handle to the HD wallet library. Create with initialize(), release with close()."""

    def __init__(self, account_factory) -> None:
        self._account = account_factory
        self._ready = True

    @classmethod
    def initialize(cls, account_factory=Account) -> "KeyGenerator":
        """
        Enable HD wallet support and return a ready handle.

        Raises:
            InitializationFailed: If the library cannot be set up
        """
        try:
            account_factory.enable_unaudited_hdwallet_features()
        except Exception as e:
            raise InitializationFailed(f"Failed to initialize key generator: {e}") from e
        logger.info("Key generator initialized")
        return cls(account_factory)

    @property
    def ready(self) -> bool:
        return self._ready

    def close(self) -> None:
        self._ready = False
        logger.info("Key generator closed")

    def _check_ready(self) -> None:
        if not self._ready:
            raise InitializationFailed("Key generator is closed")

    @staticmethod
    def chain_keys() -> list[str]:
        return list(DERIVATION_PATHS)

    def generate_mnemonic(self) -> str:
        self._check_ready()
        _, mnemonic = self._account.create_with_mnemonic(num_words=MNEMONIC_WORD_COUNT)
        return mnemonic

    def derive_account(self, mnemonic: str, chain_key: str) -> LocalAccount:
        """Derive the account for chain_key. Raises KeyError for an unknown chain."""
        self._check_ready()
        path = DERIVATION_PATHS[chain_key]
        return self._account.from_mnemonic(mnemonic, account_path=path)

    def derive_address(self, mnemonic: str, chain_key: str) -> str:
        return self.derive_account(mnemonic, chain_key).address

    def derive_addresses(self, mnemonic: str) -> dict[str, str]:
        """Public address for every supported chain key."""
        return {key: self.derive_address(mnemonic, key) for key in DERIVATION_PATHS}

    def restore_accounts(self, mnemonic: str) -> dict[str, LocalAccount]:
        """Rebuild in-memory accounts for every supported chain key."""
        return {key: self.derive_account(mnemonic, key) for key in DERIVATION_PATHS}
