from datetime import datetime

from sqlmodel import Field, SQLModel

from models.types import Amount


class PricePerShareHistoryBase(SQLModel):
    datetime: datetime
    round: int = Field(primary_key=True)
    assets_per_share: int = Field(sa_type=Amount)


class PricePerShareHistory(PricePerShareHistoryBase, table=True):
    __tablename__ = "pps_history"

    vault_address: str = Field(primary_key=True)
