from typing import List

from pydantic import BaseModel, ConfigDict


class VaultState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    underlying_token_address: str
    adapters_registry_address: str
    contracts_factory_address: str
    trader_wallet_address: str
    owner_address: str
    shares_name: str
    shares_symbol: str
    current_round: int = 0
    pending_deposit_assets: int = 0
    pending_withdraw_shares: int = 0
    processed_withdraw_assets: int = 0
    initial_vault_balance: int = 0
    after_round_vault_balance: int = 0
    vault_profit: int = 0
    total_shares: int = 0
    shares_contract_balance: int = 0


class UserDepositEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    round: int = 0
    pending_assets: int = 0
    unclaimed_shares: int = 0


class UserWithdrawalEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    round: int = 0
    pending_shares: int = 0
    unclaimed_assets: int = 0


class UserPosition(BaseModel):
    vault_address: str
    user_address: str
    shares_balance: int
    deposit: UserDepositEntry
    withdrawal: UserWithdrawalEntry
    preview_shares: int
    preview_assets: int


class PricePerShare(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    round: int
    assets_per_share: int


class PricePerShareHistoryResponse(BaseModel):
    vault_address: str
    history: List[PricePerShare] = []
