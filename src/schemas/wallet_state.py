from typing import List

from pydantic import BaseModel, ConfigDict


class SelectedAdapter(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    protocol_id: int
    adapter_address: str
    position: int


class WalletState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    vault_address: str
    underlying_token_address: str
    adapters_registry_address: str
    contracts_factory_address: str
    trader_address: str
    dynamic_value_address: str
    owner_address: str
    current_round: int = 0
    cumulative_pending_deposits: int = 0
    cumulative_pending_withdrawals: int = 0
    initial_vault_balance: int = 0
    after_round_vault_balance: int = 0
    initial_trader_balance: int = 0
    after_round_trader_balance: int = 0
    trader_profit: int = 0
    vault_profit: int = 0
    ratio_proportions: int = 0
    adapters: List[SelectedAdapter] = []
