from sqlmodel import Field, SQLModel


class AdaptersRegistryState(SQLModel, table=True):
    __tablename__ = "adapters_registry_state"

    address: str = Field(primary_key=True)
    owner_address: str


class AdapterRegistration(SQLModel, table=True):
    __tablename__ = "adapter_registration"

    registry_address: str = Field(primary_key=True)
    protocol_id: int = Field(primary_key=True)
    adapter_address: str


class TraderAdapter(SQLModel, table=True):
    """One entry of a trader wallet's selected adapters.

    ``position`` is the index in the wallet's ordered list, the primary key gives the
    protocol lookup.
    """

    __tablename__ = "trader_adapter"

    wallet_address: str = Field(primary_key=True)
    protocol_id: int = Field(primary_key=True)
    adapter_address: str
    position: int = Field(index=True)
