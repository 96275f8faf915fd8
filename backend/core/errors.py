"""Error types shared by the wallet and balance subsystems."""


class WalletError(Exception):
    """Base class for wallet vault errors."""


class InvalidPassword(WalletError):
    """
    Decryption failed.

    Raised for a wrong password and for a corrupted or malformed blob alike;
    the message never tells the two apart.
    """

    def __init__(self) -> None:
        super().__init__("Invalid password")


class WalletNotFound(WalletError):
    """No stored wallet has the requested id."""

    def __init__(self, wallet_id: str) -> None:
        super().__init__(f"Wallet not found: {wallet_id}")
        self.wallet_id = wallet_id


class BalanceFetchFailed(WalletError):
    """A single (address, network) balance could not be fetched."""


class InitializationFailed(WalletError):
    """The key-generation library is not ready."""
