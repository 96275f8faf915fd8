import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import ADDR_ETH
from core.errors import InitializationFailed
from core.networks import get_network_by_id
from server.app import create_app
from server.routers import balance as balance_router

PASSWORD = "s3cret-password"


@pytest.fixture
def client(storage):
    app = create_app(storage=storage, start_scheduler=False)
    with TestClient(app) as test_client:
        yield test_client


def fake_rpc(response=None, error=None):
    calls = []

    async def call_rpc(rpc_url, address):
        calls.append((rpc_url, address))
        if error is not None:
            raise error
        return response

    call_rpc.calls = calls
    return call_rpc


# =============================================================================
# RELAY
# =============================================================================


def test_relay_success(client, monkeypatch):
    rpc = fake_rpc(httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0xde0b6b3a7640000"}))
    monkeypatch.setattr(balance_router, "call_rpc", rpc)

    resp = client.post("/api/balance", json={"address": ADDR_ETH, "networkId": "sepolia"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "balance": "0xde0b6b3a7640000"}
    assert rpc.calls == [(get_network_by_id("sepolia").rpc_url, ADDR_ETH)]


def test_relay_missing_result_defaults_to_zero(client, monkeypatch):
    rpc = fake_rpc(httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}))
    monkeypatch.setattr(balance_router, "call_rpc", rpc)

    resp = client.post("/api/balance", json={"address": ADDR_ETH, "networkId": "bsc-testnet"})

    assert resp.json() == {"success": True, "balance": "0x0"}


@pytest.mark.parametrize(
    "body",
    [
        {"address": ADDR_ETH},
        {"networkId": "sepolia"},
        {"address": ADDR_ETH, "networkId": "mainnet"},
        {"address": "not-an-address", "networkId": "sepolia"},
        {"address": ADDR_ETH, "networkId": ["sepolia"]},
        ["not", "an", "object"],
    ],
)
def test_relay_invalid_request(client, monkeypatch, body):
    rpc = fake_rpc()
    monkeypatch.setattr(balance_router, "call_rpc", rpc)

    resp = client.post("/api/balance", json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request"}
    assert rpc.calls == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "bad"}}),
        httpx.Response(503, json={"message": "unavailable"}),
    ],
)
def test_relay_rpc_failure(client, monkeypatch, response):
    monkeypatch.setattr(balance_router, "call_rpc", fake_rpc(response))

    resp = client.post("/api/balance", json={"address": ADDR_ETH, "networkId": "sepolia"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "RPC failed"}


def test_relay_transport_failure(client, monkeypatch):
    monkeypatch.setattr(balance_router, "call_rpc", fake_rpc(error=httpx.ConnectError("down")))

    resp = client.post("/api/balance", json={"address": ADDR_ETH, "networkId": "sepolia"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Request failed"}


def test_networks_and_empty_balances(client):
    networks = client.get("/api/networks").json()
    assert [n["id"] for n in networks["networks"]] == ["sepolia", "bsc-testnet"]

    assert client.get("/api/balances").json() == {"count": 0, "wallets": {}}


# =============================================================================
# WALLETS
# =============================================================================


def test_wallet_life_cycle(client):
    created = client.post("/api/wallets", json={"name": "Main", "password": PASSWORD})
    assert created.status_code == 201
    wallet = created.json()
    assert "encryptedSecret" not in wallet
    assert set(wallet["addresses"]) == {"ethereum", "bnbchain"}

    listed = client.get("/api/wallets").json()
    assert listed["count"] == 1
    assert listed["wallets"][0]["id"] == wallet["id"]

    assert client.get(f"/api/wallets/{wallet['id']}").json() == wallet

    exported = client.post(f"/api/wallets/{wallet['id']}/export", json={"password": PASSWORD})
    assert exported.status_code == 200
    assert len(exported.json()["mnemonic"].split()) == 12


def test_wallet_errors(client):
    assert client.post("/api/wallets", json={"name": "Main", "password": "short"}).status_code == 400
    assert client.get("/api/wallets/missing").status_code == 404
    assert (
        client.post("/api/wallets/missing/export", json={"password": PASSWORD}).status_code
        == 404
    )

    wallet = client.post("/api/wallets", json={"name": "Main", "password": PASSWORD}).json()
    wrong = client.post(f"/api/wallets/{wallet['id']}/export", json={"password": "wrong-password"})
    assert wrong.status_code == 401
    assert wrong.json() == {"detail": "Invalid password"}


def test_key_generator_failure_leaves_balances_working(storage):
    def broken():
        raise InitializationFailed("library missing")

    app = create_app(storage=storage, key_generator_factory=broken, start_scheduler=False)
    with TestClient(app) as client:
        assert client.post("/api/wallets", json={"name": "Main", "password": PASSWORD}).status_code == 503
        assert client.get("/api/wallets").json() == {"count": 0, "wallets": []}
        assert client.get("/api/balances").status_code == 200
