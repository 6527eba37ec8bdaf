from sqlmodel import Field, SQLModel

from core.constants import ZERO_ADDRESS
from models.types import Amount


class TraderWalletState(SQLModel, table=True):
    __tablename__ = "trader_wallet_state"

    address: str = Field(primary_key=True)
    vault_address: str = ZERO_ADDRESS
    underlying_token_address: str
    adapters_registry_address: str
    contracts_factory_address: str
    trader_address: str
    dynamic_value_address: str
    owner_address: str

    current_round: int = 0
    cumulative_pending_deposits: int = Field(default=0, sa_type=Amount)
    cumulative_pending_withdrawals: int = Field(default=0, sa_type=Amount)

    initial_vault_balance: int = Field(default=0, sa_type=Amount)
    after_round_vault_balance: int = Field(default=0, sa_type=Amount)
    initial_trader_balance: int = Field(default=0, sa_type=Amount)
    after_round_trader_balance: int = Field(default=0, sa_type=Amount)

    # signed, a losing round makes them negative
    trader_profit: int = Field(default=0, sa_type=Amount)
    vault_profit: int = Field(default=0, sa_type=Amount)

    ratio_proportions: int = Field(default=0, sa_type=Amount)
