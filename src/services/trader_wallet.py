import logging
from typing import List

from sqlmodel import func, select

from core.constants import TRADER_WALLET_KIND, ZERO_ADDRESS
from core.errors import (
    AdapterNotPresent,
    AdapterPresent,
    CallerNotAllowed,
    InvalidAdapter,
    InvalidProtocol,
    InvalidVault,
    InvariantViolation,
    ProtocolError,
    RolloverFailed,
    SendToTraderFailed,
    TokenTransferFailed,
    TraderNotAllowed,
    ZeroAddress,
    ZeroAmount,
)
from models import TraderAdapter, TraderWalletState
from schemas import AdapterOperation, ExecutionResult
from services import replication, rounds
from services.base import Contract, contract_kind, external, require_address
from utils.web3_utils import is_zero_address

logger = logging.getLogger(__name__)


@contract_kind(TRADER_WALLET_KIND)
class TraderWallet(Contract):
    state_model = TraderWalletState

    @classmethod
    def deploy(
        cls,
        ledger,
        caller,
        underlying_token_address,
        adapters_registry_address,
        contracts_factory_address,
        trader_address,
        dynamic_value_address,
        owner_address,
    ):
        require_address(underlying_token_address, "underlying_token")
        require_address(adapters_registry_address, "adapters_registry")
        require_address(contracts_factory_address, "contracts_factory")
        require_address(trader_address, "trader")
        require_address(dynamic_value_address, "dynamic_value")
        require_address(owner_address, "owner")

        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            ledger.session.add(
                TraderWalletState(
                    address=address,
                    underlying_token_address=underlying_token_address,
                    adapters_registry_address=adapters_registry_address,
                    contracts_factory_address=contracts_factory_address,
                    trader_address=trader_address,
                    dynamic_value_address=dynamic_value_address,
                    owner_address=owner_address,
                )
            )
            ledger.session.flush()
        return cls(ledger, address)

    # collaborators

    def underlying_token(self):
        return self.ledger.get(self.state().underlying_token_address)

    def contracts_factory(self):
        return self.ledger.get(self.state().contracts_factory_address)

    def adapters_registry(self):
        return self.ledger.get(self.state().adapters_registry_address)

    def vault(self):
        vault_address = self.state().vault_address
        if is_zero_address(vault_address):
            raise ZeroAddress("vault")
        return self.ledger.get(vault_address)

    def _only_trader(self, caller: str):
        if caller != self.state().trader_address:
            raise CallerNotAllowed(caller)

    # setters

    @external()
    def set_vault_address(self, caller, vault_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(vault_address, "vault")
        if not self.contracts_factory().is_vault_allowed(vault_address):
            raise InvalidVault(vault_address)
        state.vault_address = vault_address
        self.emit("VaultAddressSet", vault=vault_address)

    @external()
    def set_adapters_registry_address(self, caller, adapters_registry_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(adapters_registry_address, "adapters_registry")
        state.adapters_registry_address = adapters_registry_address
        self.emit("AdaptersRegistryAddressSet", adapters_registry=adapters_registry_address)

    @external()
    def set_contracts_factory_address(self, caller, contracts_factory_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(contracts_factory_address, "contracts_factory")
        state.contracts_factory_address = contracts_factory_address
        self.emit("ContractsFactoryAddressSet", contracts_factory=contracts_factory_address)

    @external()
    def set_dynamic_value_address(self, caller, dynamic_value_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(dynamic_value_address, "dynamic_value")
        state.dynamic_value_address = dynamic_value_address
        self.emit("DynamicValueAddressSet", dynamic_value=dynamic_value_address)

    @external()
    def set_underlying_token_address(self, caller, underlying_token_address: str):
        self._only_trader(caller)
        require_address(underlying_token_address, "underlying_token")
        self.state().underlying_token_address = underlying_token_address
        self.emit("UnderlyingTokenAddressSet", underlying_token=underlying_token_address)

    @external()
    def set_trader_address(self, caller, trader_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(trader_address, "trader")
        if not self.contracts_factory().is_trader_allowed(trader_address):
            raise TraderNotAllowed(trader_address)
        state.trader_address = trader_address
        self.emit("TraderAddressSet", trader=trader_address)

    # adapters selection

    def _selected(self, protocol_id: int):
        return self.session.get(TraderAdapter, (self.address, protocol_id))

    def get_adapters(self) -> List[str]:
        rows = self.session.exec(
            select(TraderAdapter)
            .where(TraderAdapter.wallet_address == self.address)
            .order_by(TraderAdapter.position)
        ).all()
        return [row.adapter_address for row in rows]

    def selected_adapters(self) -> List[TraderAdapter]:
        return list(
            self.session.exec(
                select(TraderAdapter)
                .where(TraderAdapter.wallet_address == self.address)
                .order_by(TraderAdapter.position)
            ).all()
        )

    def adapters_per_protocol(self, protocol_id: int) -> str:
        row = self._selected(protocol_id)
        return row.adapter_address if row else ZERO_ADDRESS

    @external()
    def add_adapter_to_use(self, caller, protocol_id: int):
        self._only_trader(caller)
        registry = self.adapters_registry()
        if not registry.is_adapter_allowed(protocol_id):
            raise InvalidProtocol(protocol_id)
        if self._selected(protocol_id) is not None:
            raise AdapterPresent(protocol_id)

        adapter_address = registry.get_adapter_address(protocol_id)
        count = self.session.exec(
            select(func.count())
            .select_from(TraderAdapter)
            .where(TraderAdapter.wallet_address == self.address)
        ).one()
        self.session.add(
            TraderAdapter(
                wallet_address=self.address,
                protocol_id=protocol_id,
                adapter_address=adapter_address,
                position=count,
            )
        )
        self.session.flush()
        self.emit("AdapterToUseAdded", protocol_id=protocol_id, adapter=adapter_address, trader=caller)

    @external()
    def remove_adapter_to_use(self, caller, protocol_id: int):
        self._only_trader(caller)
        row = self._selected(protocol_id)
        if row is None:
            raise AdapterNotPresent(protocol_id)

        # swap with the last entry then truncate
        rows = self.selected_adapters()
        last = rows[-1]
        if last.protocol_id != row.protocol_id:
            last.position = row.position
        adapter_address = row.adapter_address
        self.session.delete(row)
        self.session.flush()
        self.emit("AdapterToUseRemoved", adapter=adapter_address, trader=caller)

    # views

    def current_round(self) -> int:
        return self.state().current_round

    def ratio_proportions(self) -> int:
        return self.state().ratio_proportions

    def get_cumulative_pending_deposits(self) -> int:
        return self.state().cumulative_pending_deposits

    def get_cumulative_pending_withdrawals(self) -> int:
        return self.state().cumulative_pending_withdrawals

    def trader_pool(self) -> int:
        return rounds.compute_trader_pool(
            self.underlying_token().balance_of(self.address),
            self.state().cumulative_pending_deposits,
        )

    def trading_delta(self) -> int:
        state = self.state()
        if state.current_round == 0:
            return 0
        return self.trader_pool() - state.initial_trader_balance

    def balances(self):
        state = self.state()
        return {
            "underlying_balance": self.underlying_token().balance_of(self.address),
            "initial_trader_balance": state.initial_trader_balance,
            "after_round_trader_balance": state.after_round_trader_balance,
            "initial_vault_balance": state.initial_vault_balance,
            "after_round_vault_balance": state.after_round_vault_balance,
            "trader_profit": state.trader_profit,
            "vault_profit": state.vault_profit,
            "ratio_proportions": state.ratio_proportions,
        }

    # trader operations

    @external()
    def trader_deposit(self, caller, amount: int):
        self._only_trader(caller)
        if amount <= 0:
            raise ZeroAmount()
        self.state().cumulative_pending_deposits += amount

        token = self.underlying_token()
        if not token.transfer_from(self.address, caller, self.address, amount):
            raise TokenTransferFailed()
        self.emit("TraderDeposit", trader=caller, token=token.address, amount=amount)

    @external()
    def withdraw_request(self, caller, amount: int):
        self._only_trader(caller)
        if amount <= 0:
            raise ZeroAmount()
        state = self.state()
        state.cumulative_pending_withdrawals += amount
        self.emit(
            "WithdrawRequest",
            user=caller,
            token=state.underlying_token_address,
            shares=amount,
        )

    @external(nonreentrant=True)
    def execute_on_protocol(
        self, caller, protocol_id: int, operation: AdapterOperation, replicate: bool
    ) -> ExecutionResult:
        self._only_trader(caller)
        selected = self._selected(protocol_id)
        registry = self.adapters_registry()
        if selected is None or not registry.is_adapter_allowed(protocol_id):
            raise InvalidAdapter(protocol_id)
        # both legs must run on the adapter the vault will resolve
        if registry.get_adapter_address(protocol_id) != selected.adapter_address:
            raise InvalidAdapter(protocol_id)
        adapter = self.ledger.get(selected.adapter_address)

        result = replication.replicate_operation(
            self,
            self.vault() if replicate else None,
            adapter,
            protocol_id,
            operation,
            replicate,
        )
        logger.info(
            "wallet %s executed operation %d on protocol %d (replicated: %s)",
            self.address,
            operation.operation_id,
            protocol_id,
            replicate,
        )
        return result

    @external(nonreentrant=True)
    def rollover(self, caller):
        self._only_trader(caller)
        vault = self.vault()
        state = self.state()
        closing_round = state.current_round

        deposits = state.cumulative_pending_deposits
        withdrawals = state.cumulative_pending_withdrawals
        rounds.ensure_rollover_allowed(
            deposits,
            withdrawals,
            vault.pending_deposit_assets(),
            vault.pending_withdraw_shares(),
            self.trading_delta(),
            vault.trading_delta(),
        )

        trader_pool = self.trader_pool()
        try:
            vault.rollover_from_trader(self.address)
        except ProtocolError as e:
            raise RolloverFailed() from e
        vault_state = vault.state()

        initial_trader_balance = trader_pool + deposits - withdrawals
        if closing_round == 0:
            state.after_round_trader_balance = initial_trader_balance
            state.after_round_vault_balance = vault_state.initial_vault_balance
            state.trader_profit = 0
            state.vault_profit = 0
        else:
            trader_delta = trader_pool - state.initial_trader_balance
            state.after_round_trader_balance = trader_pool
            state.after_round_vault_balance = vault_state.after_round_vault_balance
            state.trader_profit, state.vault_profit = rounds.split_profit(
                trader_delta, vault_state.vault_profit, state.ratio_proportions
            )

        state.initial_trader_balance = initial_trader_balance
        state.initial_vault_balance = vault_state.initial_vault_balance
        state.ratio_proportions = rounds.compute_ratio(
            state.initial_vault_balance, state.initial_trader_balance
        )
        state.cumulative_pending_deposits = 0
        state.cumulative_pending_withdrawals = 0
        state.current_round += 1
        if state.current_round != vault_state.current_round:
            raise InvariantViolation(
                f"wallet round {state.current_round} != vault round {vault_state.current_round}"
            )

        if withdrawals:
            if not self.underlying_token().transfer(self.address, state.trader_address, withdrawals):
                raise SendToTraderFailed()

        self.emit(
            "RolloverExecuted",
            timestamp=self.ledger.timestamp(),
            round=closing_round,
            trader_profit=state.trader_profit,
            vault_profit=state.vault_profit,
        )
        logger.info(
            "wallet %s closed round %d, trader profit %d, vault profit %d, ratio %d",
            self.address,
            closing_round,
            state.trader_profit,
            state.vault_profit,
            state.ratio_proportions,
        )
