from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Transaction(SQLModel, table=True):
    __tablename__ = "transaction"

    txhash: str = Field(primary_key=True)
    caller: str = Field(index=True)
    contract_address: str = Field(index=True)
    method: str
    created_on: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))


class EventLog(SQLModel, table=True):
    __tablename__ = "event_log"

    id: Optional[int] = Field(default=None, primary_key=True)
    txhash: str = Field(index=True, foreign_key="transaction.txhash")
    log_index: int
    contract_address: str = Field(index=True)
    event: str = Field(index=True)
    topic: str
    args: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_on: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
