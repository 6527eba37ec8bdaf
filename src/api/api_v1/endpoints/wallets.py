from fastapi import APIRouter, HTTPException

import schemas
from api.api_v1.deps import LedgerDep
from services.trader_wallet import TraderWallet

router = APIRouter()


@router.get("/{address}", response_model=schemas.WalletState)
async def get_wallet_state(ledger: LedgerDep, address: str):
    wallet = ledger.get(address)
    if not isinstance(wallet, TraderWallet):
        raise HTTPException(
            status_code=404,
            detail=f"Trader wallet {address} not found.",
        )

    schema_wallet = schemas.WalletState.model_validate(wallet.state())
    schema_wallet.adapters = [
        schemas.SelectedAdapter.model_validate(row) for row in wallet.selected_adapters()
    ]
    return schema_wallet
