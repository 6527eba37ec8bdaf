from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class ContractRecord(SQLModel, table=True):
    __tablename__ = "contract_record"

    address: str = Field(primary_key=True)
    kind: str = Field(index=True)
    deployer_address: str
    created_on: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
