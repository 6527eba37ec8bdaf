from sqlmodel import Field, SQLModel

from models.types import Amount


class UsersVaultStateBase(SQLModel):
    address: str = Field(primary_key=True)
    underlying_token_address: str
    adapters_registry_address: str
    contracts_factory_address: str
    trader_wallet_address: str
    owner_address: str
    shares_name: str
    shares_symbol: str

    current_round: int = 0
    pending_deposit_assets: int = Field(default=0, sa_type=Amount)
    pending_withdraw_shares: int = Field(default=0, sa_type=Amount)
    processed_withdraw_assets: int = Field(default=0, sa_type=Amount)

    initial_vault_balance: int = Field(default=0, sa_type=Amount)
    after_round_vault_balance: int = Field(default=0, sa_type=Amount)
    vault_profit: int = Field(default=0, sa_type=Amount)


# Database model, database table inferred from class name
class UsersVaultState(UsersVaultStateBase, table=True):
    __tablename__ = "users_vault_state"
