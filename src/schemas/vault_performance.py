from datetime import datetime

from pydantic import BaseModel


class VaultPerformanceBase(BaseModel):
    rounds: int
    last_assets_per_share: int
    last_round_return: float
    cumulative_return: float
    max_drawdown: float
    risk_factor: float
    apy: float | None = None


class VaultPerformance(VaultPerformanceBase):
    vault_address: str
    since: datetime | None = None
    until: datetime | None = None
