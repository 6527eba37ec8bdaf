from sqlmodel import Field, SQLModel
from .types import Amount
from .contract import ContractRecord
from .token import TokenState, TokenBalance, TokenAllowance
from .vaults import UsersVaultState, UsersVaultStateBase
from .trader_wallet import TraderWalletState
from .user_portfolio import UserDeposit, UserWithdrawal
from .pps_history import PricePerShareHistory, PricePerShareHistoryBase
from .adapters import AdaptersRegistryState, AdapterRegistration, TraderAdapter
from .contracts_factory import AllowanceKind, AllowedAddress, ContractsFactoryState
from .transaction import EventLog, Transaction
from .dex import AdapterConfig, OraclePrice, PerpOrder, PerpPosition
