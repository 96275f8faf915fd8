"""
Wallet endpoints.

Endpoints:
- GET /wallets - List wallets (public fields only)
- POST /wallets - Create a wallet protected by a password
- GET /wallets/{wallet_id} - Get one wallet
- POST /wallets/{wallet_id}/export - Decrypt the recovery phrase
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from core.errors import InitializationFailed, InvalidPassword, WalletNotFound
from core.wallet.manager import WalletManager

router = APIRouter()


class CreateWalletRequest(BaseModel):
    name: str
    password: str


class ExportRequest(BaseModel):
    password: str


def get_manager(request: Request) -> WalletManager:
    return request.app.state.wallet_manager


@router.get("/wallets")
async def list_wallets(manager: WalletManager = Depends(get_manager)) -> dict[str, Any]:
    wallets = manager.list_wallets()
    return {"count": len(wallets), "wallets": [w.public_view() for w in wallets]}


# Key derivation is CPU-bound, so these handlers are sync and run in the threadpool
@router.post("/wallets", status_code=201)
def create_wallet(
    body: CreateWalletRequest,
    manager: WalletManager = Depends(get_manager),
) -> dict[str, Any]:
    try:
        record = manager.create_wallet(body.name, body.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InitializationFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    return record.public_view()


@router.get("/wallets/{wallet_id}")
async def get_wallet(
    wallet_id: str,
    manager: WalletManager = Depends(get_manager),
) -> dict[str, Any]:
    try:
        return manager.get_wallet(wallet_id).public_view()
    except WalletNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/wallets/{wallet_id}/export")
def export_wallet(
    wallet_id: str,
    body: ExportRequest,
    manager: WalletManager = Depends(get_manager),
) -> dict[str, str]:
    try:
        return {"mnemonic": manager.export_mnemonic(wallet_id, body.password)}
    except WalletNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidPassword as e:
        raise HTTPException(status_code=401, detail=str(e))
