"""
JSON-file store for encrypted wallet records.

Append-only: records are never updated or deleted. Every append is a full
read-modify-write of the list under a lock, written through a temp file.
"""

import json
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from core.paths import WALLETS_PATH

# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass(frozen=True)
class SecretRecord:
    """A stored wallet. Holds only the encrypted mnemonic and public addresses."""

    id: str
    name: str
    encrypted_secret: str  # base64 of salt || iv || ciphertext
    public_addresses: dict[str, str] = field(default_factory=dict)
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "encryptedSecret": self.encrypted_secret,
            "publicAddresses": dict(self.public_addresses),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretRecord":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            encrypted_secret=str(data["encryptedSecret"]),
            public_addresses=dict(data.get("publicAddresses") or {}),
            created_at=str(data.get("createdAt", "")),
        )

    def public_view(self) -> dict[str, Any]:
        """Fields safe to hand to a client (no encrypted secret)."""
        return {
            "id": self.id,
            "name": self.name,
            "addresses": dict(self.public_addresses),
            "created_at": self.created_at,
        }


# =============================================================================
# WALLET STORAGE
# =============================================================================


class WalletStorage:
    """Durable, ordered collection of SecretRecord backed by a JSON file."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path else WALLETS_PATH
        self._lock = threading.Lock()

    def _load(self) -> list[SecretRecord]:
        """Parse the store file. Raises ValueError if it cannot be read."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise ValueError("Wallet file root is not a JSON array")
            return [SecretRecord.from_dict(item) for item in data]
        except (json.JSONDecodeError, OSError, KeyError, TypeError) as e:
            raise ValueError(str(e)) from e

    def _read(self) -> list[SecretRecord]:
        try:
            return self._load()
        except ValueError as e:
            # Reads as empty; the broken file stays in place
            logger.warning(f"Error loading wallets from {self.path}: {e}")
            return []

    def _quarantine(self) -> Path:
        """Move an unreadable store file aside so nothing is written over it."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, target)
        return target

    def _write(self, records: list[SecretRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def append(self, record: SecretRecord) -> None:
        """
        Append a record (atomic read-modify-write of the whole list).

        If the existing file is unreadable it is moved to
        `<name>.corrupt-<timestamp>` first, so earlier records survive for
        manual recovery and the new record starts a fresh file.
        """
        with self._lock:
            try:
                records = self._load()
            except ValueError as e:
                moved = self._quarantine()
                logger.warning(f"Unreadable wallet file {self.path} moved to {moved}: {e}")
                records = []
            records.append(record)
            self._write(records)
        logger.info(f"Stored wallet {record.id} ({record.name}), {len(records)} total")

    def list_all(self) -> list[SecretRecord]:
        """All records in insertion order."""
        with self._lock:
            return self._read()

    def find_by_id(self, wallet_id: str) -> SecretRecord | None:
        for record in self.list_all():
            if record.id == wallet_id:
                return record
        return None
