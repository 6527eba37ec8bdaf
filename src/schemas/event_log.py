from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class EventLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    log_index: int
    contract_address: str
    event: str
    topic: str
    args: Dict[str, Any] = {}
    created_on: datetime
