import json

import httpx
import pytest

from core.networks import get_all_networks
from core.wallet.keys import KeyGenerator
from core.wallet.storage import SecretRecord, WalletStorage

ADDR_ETH = "0x1111111111111111111111111111111111111111"
ADDR_BNB = "0x2222222222222222222222222222222222222222"
RELAY_URL = "http://relay.test/api/balance"


class RelayStub:
    """Callable httpx.MockTransport handler that records relay requests."""

    def __init__(self, responses=None, default=None):
        # networkId -> JSON payload, httpx.Response or exception to raise
        self.responses = responses or {}
        self.default = default or {"success": True, "balance": "0xde0b6b3a7640000"}
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        outcome = self.responses.get(body["networkId"], self.default)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, json=outcome)


@pytest.fixture
def networks():
    return get_all_networks()


@pytest.fixture
def sepolia(networks):
    return networks[0]


@pytest.fixture
def storage(tmp_path):
    return WalletStorage(tmp_path / "wallets.json")


@pytest.fixture
def key_generator():
    keys = KeyGenerator.initialize()
    yield keys
    keys.close()


def make_record(wallet_id: str, name: str = "Test", addresses=None) -> SecretRecord:
    return SecretRecord(
        id=wallet_id,
        name=name,
        encrypted_secret="AAAA",
        public_addresses=addresses if addresses is not None else {"ethereum": ADDR_ETH, "bnbchain": ADDR_BNB},
    )
