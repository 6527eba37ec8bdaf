from typing import Optional

from pydantic import BaseModel


class AdapterOperation(BaseModel):
    """Adapter specific operation id plus its ABI encoded payload."""

    operation_id: int
    data: bytes


class ExecutionResult(BaseModel):
    protocol_id: int
    operation_id: int
    replicated: bool
    proportion: int
    initial_balance: int
    balance_delta: int
    trader_return_data: bytes = b""
    vault_return_data: Optional[bytes] = None
