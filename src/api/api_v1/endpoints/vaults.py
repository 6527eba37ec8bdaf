from fastapi import APIRouter, HTTPException

import schemas
from api.api_v1.deps import LedgerDep
from services.ledger import Ledger
from services.performance import calculate_vault_performance
from services.users_vault import UsersVault

router = APIRouter()


def get_vault_or_404(ledger: Ledger, address: str) -> UsersVault:
    vault = ledger.get(address)
    if not isinstance(vault, UsersVault):
        raise HTTPException(
            status_code=404,
            detail=f"Users vault {address} not found.",
        )
    return vault


def _vault_state(vault: UsersVault) -> schemas.VaultState:
    schema_vault = schemas.VaultState.model_validate(vault.state())
    schema_vault.total_shares = vault.total_supply()
    schema_vault.shares_contract_balance = vault.get_shares_contract_balance()
    return schema_vault


@router.get("/{address}", response_model=schemas.VaultState)
async def get_vault_state(ledger: LedgerDep, address: str):
    return _vault_state(get_vault_or_404(ledger, address))


@router.get("/{address}/users/{user}", response_model=schemas.UserPosition)
async def get_user_position(ledger: LedgerDep, address: str, user: str):
    vault = get_vault_or_404(ledger, address)
    return schemas.UserPosition(
        vault_address=vault.address,
        user_address=user,
        shares_balance=vault.balance_of(user),
        deposit=schemas.UserDepositEntry.model_validate(vault.user_deposits(user)),
        withdrawal=schemas.UserWithdrawalEntry.model_validate(vault.user_withdrawals(user)),
        preview_shares=vault.preview_shares(user),
        preview_assets=vault.preview_assets(user),
    )


@router.get("/{address}/price-per-share", response_model=schemas.PricePerShareHistoryResponse)
async def get_price_per_share(ledger: LedgerDep, address: str):
    vault = get_vault_or_404(ledger, address)
    return schemas.PricePerShareHistoryResponse(
        vault_address=vault.address,
        history=[schemas.PricePerShare.model_validate(h) for h in vault.price_history()],
    )


@router.get("/{address}/performance", response_model=schemas.VaultPerformance)
async def get_vault_performance(ledger: LedgerDep, address: str):
    vault = get_vault_or_404(ledger, address)
    return calculate_vault_performance(vault.address, list(vault.price_history()))
