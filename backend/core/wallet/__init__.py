"""Password-protected wallet storage."""

from core.wallet.encryption import decrypt_mnemonic, encrypt_mnemonic
from core.wallet.keys import KeyGenerator
from core.wallet.manager import WalletManager
from core.wallet.storage import SecretRecord, WalletStorage

__all__ = [
    "encrypt_mnemonic",
    "decrypt_mnemonic",
    "KeyGenerator",
    "SecretRecord",
    "WalletStorage",
    "WalletManager",
]
