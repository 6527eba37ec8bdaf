from sqlmodel import Field, SQLModel

from models.types import Amount


class UserDeposit(SQLModel, table=True):
    __tablename__ = "user_deposit"

    vault_address: str = Field(primary_key=True)
    user_address: str = Field(primary_key=True)
    round: int = 0
    pending_assets: int = Field(default=0, sa_type=Amount)
    unclaimed_shares: int = Field(default=0, sa_type=Amount)


class UserWithdrawal(SQLModel, table=True):
    __tablename__ = "user_withdrawal"

    vault_address: str = Field(primary_key=True)
    user_address: str = Field(primary_key=True)
    round: int = 0
    pending_shares: int = Field(default=0, sa_type=Amount)
    unclaimed_assets: int = Field(default=0, sa_type=Amount)
