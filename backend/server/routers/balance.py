"""
Balance endpoints.

Endpoints:
- POST /balance - Relay: {address, networkId} -> eth_getBalance on the network's RPC node
- GET /balances - Latest balance state per wallet (from the scheduler)
- GET /networks - Configured network descriptors
"""

from typing import Any

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from web3 import Web3

from core.networks import get_all_networks, get_network_by_id
from core.paths import API_TIMEOUT

router = APIRouter()

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


async def call_rpc(rpc_url: str, address: str) -> httpx.Response:
    """Send eth_getBalance for address at the latest block."""
    payload = {
        "jsonrpc": "2.0",
        "method": "eth_getBalance",
        "params": [address, "latest"],
        "id": 1,
    }
    async with httpx.AsyncClient(timeout=API_TIMEOUT) as client:
        return await client.post(rpc_url, json=payload)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/balance")
async def relay_balance(request: Request) -> Any:
    """
    Forward a balance query to the chain node.

    Returns {"success": true, "balance": "0x..."} or {"error": ...}.
    """
    try:
        body = await request.json()
    except ValueError:
        return _error("Invalid request", 400)

    if not isinstance(body, dict):
        return _error("Invalid request", 400)

    address = body.get("address")
    network_id = body.get("networkId")
    if not isinstance(address, str) or not isinstance(network_id, str):
        return _error("Invalid request", 400)

    network = get_network_by_id(network_id)
    if network is None or not Web3.is_address(address):
        return _error("Invalid request", 400)

    try:
        resp = await call_rpc(network.rpc_url, address)
        data = resp.json()
    except (httpx.RequestError, ValueError) as e:
        logger.warning(f"RPC request to {network.id} failed: {e}")
        return _error("Request failed", 500)

    if not resp.is_success or not isinstance(data, dict) or data.get("error"):
        logger.warning(f"RPC error from {network.id}: status={resp.status_code}")
        return _error("RPC failed", 500)

    return {"success": True, "balance": data.get("result") or "0x0"}


@router.get("/balances")
async def get_balances(request: Request) -> dict[str, Any]:
    """Latest balance state of every wallet seen by the scheduler."""
    scheduler = request.app.state.balance_scheduler
    states = scheduler.states()
    return {
        "count": len(states),
        "wallets": {wallet_id: state.to_dict() for wallet_id, state in states.items()},
    }


@router.get("/networks")
async def get_networks() -> dict[str, Any]:
    networks = get_all_networks()
    return {"count": len(networks), "networks": [n.to_dict() for n in networks]}
