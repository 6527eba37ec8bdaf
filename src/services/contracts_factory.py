import logging

from core.config import settings
from core.constants import CONTRACTS_FACTORY_KIND, MAX_FEE_RATE
from core.errors import FeeRateError, InvalidTraderWallet, TraderNotAllowed
from models import AllowanceKind, AllowedAddress, ContractsFactoryState
from services.base import Contract, contract_kind, external, require_address
from services.trader_wallet import TraderWallet
from services.users_vault import UsersVault

logger = logging.getLogger(__name__)


@contract_kind(CONTRACTS_FACTORY_KIND)
class ContractsFactory(Contract):
    """Allow-lists, fee rate and deployment of trader wallets and users vaults."""

    state_model = ContractsFactoryState

    @classmethod
    def deploy(cls, ledger, caller, fee_rate=None, owner_address=None):
        fee_rate = settings.DEFAULT_FEE_RATE if fee_rate is None else fee_rate
        if fee_rate > MAX_FEE_RATE:
            raise FeeRateError(fee_rate)
        address = ledger.new_address()
        with ledger.call(address, caller, "deploy"):
            ledger.register(address, cls.kind, caller)
            ledger.session.add(
                ContractsFactoryState(
                    address=address,
                    owner_address=owner_address or caller,
                    fee_rate=fee_rate,
                )
            )
            ledger.session.flush()
        return cls(ledger, address)

    def _is_allowed(self, kind: AllowanceKind, address: str) -> bool:
        return self.session.get(AllowedAddress, (self.address, kind, address)) is not None

    def _allow(self, kind: AllowanceKind, address: str):
        if not self._is_allowed(kind, address):
            self.session.add(AllowedAddress(factory_address=self.address, kind=kind, address=address))
            self.session.flush()

    def _disallow(self, kind: AllowanceKind, address: str):
        row = self.session.get(AllowedAddress, (self.address, kind, address))
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def is_investor_allowed(self, address: str) -> bool:
        return self._is_allowed(AllowanceKind.investor, address)

    def is_trader_allowed(self, address: str) -> bool:
        return self._is_allowed(AllowanceKind.trader, address)

    def is_vault_allowed(self, address: str) -> bool:
        return self._is_allowed(AllowanceKind.vault, address)

    def is_trader_wallet_allowed(self, address: str) -> bool:
        return self._is_allowed(AllowanceKind.trader_wallet, address)

    def fee_rate(self) -> int:
        return self.state().fee_rate

    @external()
    def set_fee_rate(self, caller, fee_rate: int):
        self._only_owner(caller, self.state().owner_address)
        if fee_rate > MAX_FEE_RATE:
            raise FeeRateError(fee_rate)
        self.state().fee_rate = fee_rate
        self.emit("FeeRateSet", fee_rate=fee_rate)

    @external()
    def set_adapters_registry_address(self, caller, adapters_registry_address: str):
        self._only_owner(caller, self.state().owner_address)
        require_address(adapters_registry_address, "adapters_registry")
        self.state().adapters_registry_address = adapters_registry_address
        self.emit("AdaptersRegistryAddressSet", adapters_registry=adapters_registry_address)

    @external()
    def add_investor(self, caller, investor: str):
        self._only_owner(caller, self.state().owner_address)
        require_address(investor, "investor")
        self._allow(AllowanceKind.investor, investor)
        self.emit("InvestorAdded", investor=investor)

    @external()
    def remove_investor(self, caller, investor: str):
        self._only_owner(caller, self.state().owner_address)
        self._disallow(AllowanceKind.investor, investor)
        self.emit("InvestorRemoved", investor=investor)

    @external()
    def add_trader(self, caller, trader: str):
        self._only_owner(caller, self.state().owner_address)
        require_address(trader, "trader")
        self._allow(AllowanceKind.trader, trader)
        self.emit("TraderAdded", trader=trader)

    @external()
    def remove_trader(self, caller, trader: str):
        self._only_owner(caller, self.state().owner_address)
        self._disallow(AllowanceKind.trader, trader)
        self.emit("TraderRemoved", trader=trader)

    @external()
    def create_trader_wallet(
        self,
        caller,
        underlying_token_address: str,
        trader_address: str,
        dynamic_value_address: str,
        owner_address: str,
    ) -> TraderWallet:
        state = self.state()
        self._only_owner(caller, state.owner_address)
        if not self.is_trader_allowed(trader_address):
            raise TraderNotAllowed(trader_address)
        wallet = TraderWallet.deploy(
            self.ledger,
            self.address,
            underlying_token_address=underlying_token_address,
            adapters_registry_address=state.adapters_registry_address,
            contracts_factory_address=self.address,
            trader_address=trader_address,
            dynamic_value_address=dynamic_value_address,
            owner_address=owner_address,
        )
        self._allow(AllowanceKind.trader_wallet, wallet.address)
        self.emit(
            "TraderWalletDeployed",
            trader_wallet=wallet.address,
            trader=trader_address,
            underlying_token=underlying_token_address,
        )
        logger.info("trader wallet %s deployed for %s", wallet.address, trader_address)
        return wallet

    @external()
    def create_users_vault(
        self,
        caller,
        underlying_token_address: str,
        trader_wallet_address: str,
        owner_address: str,
        shares_name: str = settings.SHARES_NAME,
        shares_symbol: str = settings.SHARES_SYMBOL,
    ) -> UsersVault:
        state = self.state()
        self._only_owner(caller, state.owner_address)
        if not self.is_trader_wallet_allowed(trader_wallet_address):
            raise InvalidTraderWallet(trader_wallet_address)
        vault = UsersVault.deploy(
            self.ledger,
            self.address,
            underlying_token_address=underlying_token_address,
            adapters_registry_address=state.adapters_registry_address,
            contracts_factory_address=self.address,
            trader_wallet_address=trader_wallet_address,
            owner_address=owner_address,
            shares_name=shares_name,
            shares_symbol=shares_symbol,
        )
        self._allow(AllowanceKind.vault, vault.address)
        self.emit("UsersVaultDeployed", users_vault=vault.address, trader_wallet=trader_wallet_address)
        logger.info("users vault %s deployed for %s", vault.address, trader_wallet_address)
        return vault
