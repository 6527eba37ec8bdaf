from typing import Optional

from sqlmodel import Field, SQLModel

from models.types import Amount


class AdapterConfig(SQLModel, table=True):
    __tablename__ = "adapter_config"

    address: str = Field(primary_key=True)
    owner_address: str
    pool_fee_bps: int = 0
    slippage_allowance_min: int = Field(default=0, sa_type=Amount)
    slippage_allowance_max: int = Field(default=0, sa_type=Amount)
    max_leverage: int = 0


class OraclePrice(SQLModel, table=True):
    """Price of one token unit in underlying units, 1e18 fixed point."""

    __tablename__ = "oracle_price"

    adapter_address: str = Field(primary_key=True)
    token_address: str = Field(primary_key=True)
    price: int = Field(sa_type=Amount)


class PerpPosition(SQLModel, table=True):
    __tablename__ = "perp_position"

    adapter_address: str = Field(primary_key=True)
    account: str = Field(primary_key=True)
    index_token: str = Field(primary_key=True)
    is_long: bool = Field(primary_key=True)
    size: int = Field(default=0, sa_type=Amount)
    collateral: int = Field(default=0, sa_type=Amount)
    entry_price: int = Field(default=0, sa_type=Amount)


class PerpOrder(SQLModel, table=True):
    __tablename__ = "perp_order"

    id: Optional[int] = Field(default=None, primary_key=True)
    adapter_address: str = Field(index=True)
    account: str = Field(index=True)
    order_index: int
    index_token: str
    is_long: bool
    collateral: int = Field(sa_type=Amount)
    size: int = Field(sa_type=Amount)
    trigger_price: int = Field(sa_type=Amount)
    cancelled: bool = False
    executed: bool = False
