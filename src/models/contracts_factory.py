import enum

from sqlmodel import Field, SQLModel

from core.constants import ZERO_ADDRESS
from models.types import Amount


class AllowanceKind(str, enum.Enum):
    investor = "investor"
    trader = "trader"
    vault = "vault"
    trader_wallet = "trader_wallet"


class ContractsFactoryState(SQLModel, table=True):
    __tablename__ = "contracts_factory_state"

    address: str = Field(primary_key=True)
    owner_address: str
    adapters_registry_address: str = ZERO_ADDRESS
    fee_rate: int = Field(default=0, sa_type=Amount)


class AllowedAddress(SQLModel, table=True):
    __tablename__ = "allowed_address"

    factory_address: str = Field(primary_key=True)
    kind: AllowanceKind = Field(primary_key=True)
    address: str = Field(primary_key=True)
