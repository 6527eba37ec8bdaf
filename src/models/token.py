from sqlmodel import Field, SQLModel

from models.types import Amount


class TokenState(SQLModel, table=True):
    __tablename__ = "token_state"

    address: str = Field(primary_key=True)
    name: str
    symbol: str
    decimals: int = 18
    owner_address: str
    total_supply: int = Field(default=0, sa_type=Amount)


class TokenBalance(SQLModel, table=True):
    __tablename__ = "token_balance"

    token_address: str = Field(primary_key=True)
    holder_address: str = Field(primary_key=True)
    amount: int = Field(default=0, sa_type=Amount)


class TokenAllowance(SQLModel, table=True):
    __tablename__ = "token_allowance"

    token_address: str = Field(primary_key=True)
    owner_address: str = Field(primary_key=True)
    spender_address: str = Field(primary_key=True)
    amount: int = Field(default=0, sa_type=Amount)
