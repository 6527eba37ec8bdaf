import logging
from datetime import datetime, timezone

from sqlmodel import select

from core.constants import USERS_VAULT_KIND, USERS_VAULT_LABEL, VAULT
from core.errors import (
    AdapterOperationFailed,
    CallerNotAllowed,
    InsufficientAssets,
    InsufficientShares,
    InvalidAdapter,
    InvalidRound,
    InvalidTraderWallet,
    InvariantViolation,
    TokenTransferFailed,
    UserNotAllowed,
    ZeroAmount,
)
from models import PricePerShareHistory, UserDeposit, UserWithdrawal, UsersVaultState
from schemas import AdapterOperation
from services import rounds
from services.base import contract_kind, external, require_address
from services.token import ERC20Token

logger = logging.getLogger(__name__)


@contract_kind(USERS_VAULT_KIND)
class UsersVault(ERC20Token):
    """Depositor pool that mirrors the trader wallet.

    The vault is its own share token: shares live in the token tables under the vault's
    address and the vault is the only account allowed to mint or burn them.
    """

    state_model = UsersVaultState

    @classmethod
    def deploy(
        cls,
        ledger,
        caller,
        underlying_token_address,
        adapters_registry_address,
        contracts_factory_address,
        trader_wallet_address,
        owner_address,
        shares_name,
        shares_symbol,
    ):
        require_address(underlying_token_address, "underlying_token")
        require_address(adapters_registry_address, "adapters_registry")
        require_address(contracts_factory_address, "contracts_factory")
        require_address(trader_wallet_address, "trader_wallet")
        require_address(owner_address, "owner")

        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            underlying = ledger.get(underlying_token_address)
            cls.initialize_token(
                ledger, address, shares_name, shares_symbol, underlying.decimals(), address
            )
            ledger.session.add(
                UsersVaultState(
                    address=address,
                    underlying_token_address=underlying_token_address,
                    adapters_registry_address=adapters_registry_address,
                    contracts_factory_address=contracts_factory_address,
                    trader_wallet_address=trader_wallet_address,
                    owner_address=owner_address,
                    shares_name=shares_name,
                    shares_symbol=shares_symbol,
                )
            )
            ledger.session.flush()
        return cls(ledger, address)

    # collaborators

    def underlying_token(self) -> ERC20Token:
        return self.ledger.get(self.state().underlying_token_address)

    def contracts_factory(self):
        return self.ledger.get(self.state().contracts_factory_address)

    def adapters_registry(self):
        return self.ledger.get(self.state().adapters_registry_address)

    # setters

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
    def set_underlying_token_address(self, caller, underlying_token_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(underlying_token_address, "underlying_token")
        state.underlying_token_address = underlying_token_address
        self.emit("UnderlyingTokenAddressSet", underlying_token=underlying_token_address)

    @external()
    def set_trader_wallet_address(self, caller, trader_wallet_address: str):
        state = self.state()
        self._only_owner(caller, state.owner_address)
        require_address(trader_wallet_address, "trader_wallet")
        if not self.contracts_factory().is_trader_wallet_allowed(trader_wallet_address):
            raise InvalidTraderWallet(trader_wallet_address)
        state.trader_wallet_address = trader_wallet_address
        self.emit("TraderWalletAddressSet", trader_wallet=trader_wallet_address)

    # views

    def current_round(self) -> int:
        return self.state().current_round

    def pending_deposit_assets(self) -> int:
        return self.state().pending_deposit_assets

    def pending_withdraw_shares(self) -> int:
        return self.state().pending_withdraw_shares

    def processed_withdraw_assets(self) -> int:
        return self.state().processed_withdraw_assets

    def assets_per_share_x_round(self, round: int) -> int:
        history = self.session.get(
            PricePerShareHistory, {"vault_address": self.address, "round": round}
        )
        if history is None:
            raise InvalidRound(round)
        return history.assets_per_share

    def price_history(self):
        return self.session.exec(
            select(PricePerShareHistory)
            .where(PricePerShareHistory.vault_address == self.address)
            .order_by(PricePerShareHistory.round)
        ).all()

    def user_deposits(self, user: str) -> UserDeposit:
        row = self.session.get(UserDeposit, (self.address, user))
        return row or UserDeposit(vault_address=self.address, user_address=user)

    def user_withdrawals(self, user: str) -> UserWithdrawal:
        row = self.session.get(UserWithdrawal, (self.address, user))
        return row or UserWithdrawal(vault_address=self.address, user_address=user)

    def get_shares_contract_balance(self) -> int:
        return self.balance_of(self.address)

    def pool_balance(self) -> int:
        state = self.state()
        return rounds.compute_pool(
            self.underlying_token().balance_of(self.address),
            state.pending_deposit_assets,
            state.processed_withdraw_assets,
        )

    def trading_delta(self) -> int:
        state = self.state()
        if state.current_round == 0:
            return 0
        return self.pool_balance() - state.initial_vault_balance

    def preview_shares(self, user: str) -> int:
        entry = self.user_deposits(user)
        _, _, unclaimed = rounds.reconcile_deposit(
            entry.round,
            entry.pending_assets,
            entry.unclaimed_shares,
            self.current_round(),
            self.assets_per_share_x_round,
        )
        return unclaimed

    def preview_assets(self, user: str) -> int:
        entry = self.user_withdrawals(user)
        _, _, unclaimed = rounds.reconcile_withdrawal(
            entry.round,
            entry.pending_shares,
            entry.unclaimed_assets,
            self.current_round(),
            self.assets_per_share_x_round,
        )
        return unclaimed

    # user operations

    def _only_investor(self, caller: str):
        if not self.contracts_factory().is_investor_allowed(caller):
            raise UserNotAllowed(caller)

    def _reconciled_deposit(self, user: str) -> UserDeposit:
        entry = self._get_or_create(UserDeposit, vault_address=self.address, user_address=user)
        entry.round, entry.pending_assets, entry.unclaimed_shares = rounds.reconcile_deposit(
            entry.round,
            entry.pending_assets,
            entry.unclaimed_shares,
            self.current_round(),
            self.assets_per_share_x_round,
        )
        return entry

    def _reconciled_withdrawal(self, user: str) -> UserWithdrawal:
        entry = self._get_or_create(UserWithdrawal, vault_address=self.address, user_address=user)
        entry.round, entry.pending_shares, entry.unclaimed_assets = rounds.reconcile_withdrawal(
            entry.round,
            entry.pending_shares,
            entry.unclaimed_assets,
            self.current_round(),
            self.assets_per_share_x_round,
        )
        return entry

    @external(nonreentrant=True)
    def user_deposit(self, caller, amount: int):
        self._only_investor(caller)
        if amount <= 0:
            raise ZeroAmount()

        state = self.state()
        entry = self._reconciled_deposit(caller)
        entry.pending_assets += amount
        state.pending_deposit_assets += amount

        token = self.underlying_token()
        if not token.transfer_from(self.address, caller, self.address, amount):
            raise TokenTransferFailed()
        self.emit("UserDeposited", user=caller, token=token.address, amount=amount)

    @external(nonreentrant=True)
    def claim_shares(self, caller, amount: int, receiver: str):
        self._only_investor(caller)
        state = self.state()
        if state.current_round == 0:
            raise InvalidRound(0)
        if amount <= 0:
            raise ZeroAmount()
        require_address(receiver, "receiver")

        entry = self._reconciled_deposit(caller)
        if amount > entry.unclaimed_shares:
            raise InsufficientShares(entry.unclaimed_shares, amount)
        entry.unclaimed_shares -= amount

        self._transfer(self.address, receiver, amount)
        self.emit(
            "SharesClaimed",
            round=state.current_round,
            amount=amount,
            owner=caller,
            receiver=receiver,
        )

    @external(nonreentrant=True)
    def withdraw_request(self, caller, shares: int):
        self._only_investor(caller)
        state = self.state()
        if state.current_round == 0:
            raise InvalidRound(0)
        if shares <= 0:
            raise ZeroAmount()
        balance = self.balance_of(caller)
        if balance < shares:
            raise InsufficientShares(balance, shares)

        entry = self._reconciled_withdrawal(caller)
        entry.pending_shares += shares
        state.pending_withdraw_shares += shares

        # escrowed until the rollover burns them
        self._transfer(caller, self.address, shares)
        self.emit("WithdrawRequest", user=caller, token=self.address, shares=shares)

    @external(nonreentrant=True)
    def claim_assets(self, caller, amount: int, receiver: str):
        self._only_investor(caller)
        state = self.state()
        if state.current_round == 0:
            raise InvalidRound(0)
        if amount <= 0:
            raise ZeroAmount()
        require_address(receiver, "receiver")

        entry = self._reconciled_withdrawal(caller)
        if amount > entry.unclaimed_assets:
            raise InsufficientAssets(entry.unclaimed_assets, amount)
        if amount > state.processed_withdraw_assets:
            raise InvariantViolation("claim exceeds processed withdraw assets")
        entry.unclaimed_assets -= amount
        state.processed_withdraw_assets -= amount

        if not self.underlying_token().transfer(self.address, receiver, amount):
            raise TokenTransferFailed()
        self.emit(
            "AssetsClaimed",
            round=state.current_round,
            amount=amount,
            owner=caller,
            receiver=receiver,
        )

    # trader wallet operations

    def _only_trader_wallet(self, caller: str):
        if caller != self.state().trader_wallet_address:
            raise CallerNotAllowed(caller)

    @external(nonreentrant=True)
    def rollover_from_trader(self, caller):
        self._only_trader_wallet(caller)
        state = self.state()
        token = self.underlying_token()

        settlement = rounds.settle_vault_round(
            current_round=state.current_round,
            balance=token.balance_of(self.address),
            pending_deposit_assets=state.pending_deposit_assets,
            pending_withdraw_shares=state.pending_withdraw_shares,
            processed_withdraw_assets=state.processed_withdraw_assets,
            total_supply=self.total_supply(),
            initial_vault_balance=state.initial_vault_balance,
        )

        self.session.add(
            PricePerShareHistory(
                vault_address=self.address,
                round=state.current_round,
                assets_per_share=settlement.price,
                datetime=datetime.now(tz=timezone.utc),
            )
        )
        if settlement.minted_shares:
            self._mint(self.address, settlement.minted_shares)
        if settlement.burned_shares:
            self._burn(self.address, settlement.burned_shares)

        state.after_round_vault_balance = settlement.pool
        state.vault_profit = settlement.profit
        state.processed_withdraw_assets += settlement.redeemed_assets
        state.initial_vault_balance = settlement.initial_balance
        state.pending_deposit_assets = 0
        state.pending_withdraw_shares = 0
        state.current_round += 1
        self.session.flush()

        logger.info(
            "vault %s closed round %d at %d assets per share, profit %d",
            self.address,
            state.current_round - 1,
            settlement.price,
            settlement.profit,
        )
        return settlement

    @external(nonreentrant=True)
    def execute_on_protocol(self, caller, protocol_id: int, operation: AdapterOperation, ratio: int) -> bytes:
        self._only_trader_wallet(caller)
        registry = self.adapters_registry()
        if not registry.is_adapter_allowed(protocol_id):
            raise InvalidAdapter(protocol_id)
        adapter = self.ledger.get(registry.get_adapter_address(protocol_id))

        token = self.underlying_token()
        initial_balance = token.balance_of(self.address)
        success, return_data = adapter.execute_operation(self, ratio, operation)
        if not success:
            raise AdapterOperationFailed(VAULT)

        self.emit(
            "OperationExecuted",
            protocol_id=protocol_id,
            timestamp=self.ledger.timestamp(),
            label=USERS_VAULT_LABEL,
            replicate=True,
            initial_balance=initial_balance,
            balance_delta=token.balance_of(self.address) - initial_balance,
        )
        return return_data

    def snapshot(self):
        """Balances that move, for comparing before and after a call."""
        state = self.state()
        return {
            "current_round": state.current_round,
            "pending_deposit_assets": state.pending_deposit_assets,
            "pending_withdraw_shares": state.pending_withdraw_shares,
            "processed_withdraw_assets": state.processed_withdraw_assets,
            "initial_vault_balance": state.initial_vault_balance,
            "vault_profit": state.vault_profit,
            "total_supply": self.total_supply(),
            "underlying_balance": self.underlying_token().balance_of(self.address),
        }
