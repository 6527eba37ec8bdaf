from .event_log import EventLog
from .operation import AdapterOperation, ExecutionResult
from .vault_performance import VaultPerformance, VaultPerformanceBase
from .vault_state import (
    PricePerShare,
    PricePerShareHistoryResponse,
    UserDepositEntry,
    UserPosition,
    UserWithdrawalEntry,
    VaultState,
)
from .wallet_state import SelectedAdapter, WalletState
