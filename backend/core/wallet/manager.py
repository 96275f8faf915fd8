"""Wallet creation, export and unlock on top of the encrypted store."""

import uuid

from eth_account.signers.local import LocalAccount
from loguru import logger

from core.errors import InitializationFailed, WalletNotFound
from core.paths import MAX_WALLET_NAME_LENGTH, MIN_PASSWORD_LENGTH
from core.wallet.encryption import decrypt_mnemonic, encrypt_mnemonic
from core.wallet.keys import KeyGenerator
from core.wallet.storage import SecretRecord, WalletStorage


class WalletManager:
    """
    Creates and unlocks password-protected wallets.

    The mnemonic only exists in memory for the duration of a call; the store
    receives the encrypted blob and the derived public addresses.
    """

    def __init__(self, storage: WalletStorage, key_generator: KeyGenerator | None = None):
        self.storage = storage
        self.key_generator = key_generator

    def _keys(self) -> KeyGenerator:
        if self.key_generator is None or not self.key_generator.ready:
            raise InitializationFailed("Key generator is not available")
        return self.key_generator

    @staticmethod
    def validate(name: str, password: str) -> str:
        """Return the cleaned wallet name. Raises ValueError on bad input."""
        name = (name or "").strip()
        if not name:
            raise ValueError("Wallet name is required")
        if len(name) > MAX_WALLET_NAME_LENGTH:
            raise ValueError(
                f"Wallet name must be at most {MAX_WALLET_NAME_LENGTH} characters"
            )
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return name

    def create_wallet(self, name: str, password: str) -> SecretRecord:
        name = self.validate(name, password)
        keys = self._keys()

        mnemonic = keys.generate_mnemonic()
        record = SecretRecord(
            id=str(uuid.uuid4()),
            name=name,
            encrypted_secret=encrypt_mnemonic(mnemonic, password),
            public_addresses=keys.derive_addresses(mnemonic),
        )
        self.storage.append(record)

        logger.info(f"Created wallet {record.id} with {len(record.public_addresses)} addresses")
        return record

    def list_wallets(self) -> list[SecretRecord]:
        return self.storage.list_all()

    def get_wallet(self, wallet_id: str) -> SecretRecord:
        record = self.storage.find_by_id(wallet_id)
        if record is None:
            raise WalletNotFound(wallet_id)
        return record

    def export_mnemonic(self, wallet_id: str, password: str) -> str:
        """Decrypt and return the recovery phrase. The only way to read it back."""
        record = self.get_wallet(wallet_id)
        return decrypt_mnemonic(record.encrypted_secret, password)

    def unlock_wallet(self, wallet_id: str, password: str) -> dict[str, LocalAccount]:
        """Rebuild the wallet's accounts in memory; nothing is persisted."""
        keys = self._keys()
        mnemonic = self.export_mnemonic(wallet_id, password)
        return keys.restore_accounts(mnemonic)
