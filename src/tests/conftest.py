from dataclasses import dataclass, field
from typing import List

import pytest
from sqlmodel import Session, SQLModel

from core.constants import AMOUNT_1E18, GMX_PROTOCOL_ID, UNISWAP_PROTOCOL_ID
from core.db import build_engine
from services.adapters.perpetuals import PerpetualsAdapter
from services.adapters.spot_swap import SpotSwapAdapter
from services.adapters_registry import AdaptersRegistry
from services.contracts_factory import ContractsFactory
from services.ledger import Ledger
from services.token import ERC20Token
from services.trader_wallet import TraderWallet
from services.users_vault import UsersVault

WETH_PRICE = 2000 * AMOUNT_1E18


def e18(value: int) -> int:
    return value * AMOUNT_1E18


@dataclass
class Deployment:
    ledger: Ledger
    owner: str
    trader: str
    users: List[str]
    usdc: ERC20Token
    weth: ERC20Token
    factory: ContractsFactory
    registry: AdaptersRegistry
    spot: SpotSwapAdapter
    perps: PerpetualsAdapter
    wallet: TraderWallet
    vault: UsersVault
    outsider: str = field(default="")

    def fund(self, holder: str, amount: int):
        self.usdc.mint(self.owner, holder, amount)

    def rollover(self):
        self.wallet.rollover(self.trader)

    def gain(self, holder: str, amount: int):
        """Trading result realised outside the adapters."""
        self.usdc.mint(self.owner, holder, amount)


@pytest.fixture()
def db_engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(db_engine):
    session = Session(db_engine)
    yield session
    session.close()


@pytest.fixture()
def ledger(db_session: Session) -> Ledger:
    return Ledger(db_session)


def deploy_protocol(ledger: Ledger, user_count: int = 3) -> Deployment:
    owner = ledger.new_address()
    trader = ledger.new_address()
    users = [ledger.new_address() for _ in range(user_count)]

    usdc = ERC20Token.deploy(ledger, owner, "USD Coin", "USDC")
    weth = ERC20Token.deploy(ledger, owner, "Wrapped Ether", "WETH")

    factory = ContractsFactory.deploy(ledger, owner)
    registry = AdaptersRegistry.deploy(ledger, owner)
    factory.set_adapters_registry_address(owner, registry.address)

    spot = SpotSwapAdapter.deploy(ledger, owner)
    perps = PerpetualsAdapter.deploy(ledger, owner)
    registry.set_adapter(owner, UNISWAP_PROTOCOL_ID, spot.address)
    registry.set_adapter(owner, GMX_PROTOCOL_ID, perps.address)

    spot.set_price(owner, usdc.address, AMOUNT_1E18)
    spot.set_price(owner, weth.address, WETH_PRICE)
    perps.set_price(owner, weth.address, WETH_PRICE)
    weth.mint(owner, spot.address, e18(1000))
    usdc.mint(owner, spot.address, e18(1_000_000))
    usdc.mint(owner, perps.address, e18(1_000_000))

    factory.add_trader(owner, trader)
    for user in users:
        factory.add_investor(owner, user)

    wallet = factory.create_trader_wallet(owner, usdc.address, trader, ledger.new_address(), owner)
    vault = factory.create_users_vault(owner, usdc.address, wallet.address, owner)
    wallet.set_vault_address(owner, vault.address)
    wallet.add_adapter_to_use(trader, UNISWAP_PROTOCOL_ID)
    wallet.add_adapter_to_use(trader, GMX_PROTOCOL_ID)

    usdc.approve(trader, wallet.address, e18(1_000_000_000))
    for user in users:
        usdc.approve(user, vault.address, e18(1_000_000_000))

    return Deployment(
        ledger=ledger,
        owner=owner,
        trader=trader,
        users=users,
        usdc=usdc,
        weth=weth,
        factory=factory,
        registry=registry,
        spot=spot,
        perps=perps,
        wallet=wallet,
        vault=vault,
        outsider=ledger.new_address(),
    )


@pytest.fixture()
def deployment(ledger: Ledger) -> Deployment:
    return deploy_protocol(ledger)
