import pytest

from conftest import e18
from core.constants import GMX_PROTOCOL_ID, MAX_FEE_RATE, UNISWAP_PROTOCOL_ID, ZERO_ADDRESS
from core.errors import (
    FeeRateError,
    InvalidTraderWallet,
    NotOwner,
    TraderNotAllowed,
    ZeroAddress,
)
from services.adapters_registry import AdaptersRegistry
from services.contracts_factory import ContractsFactory
from services.trader_wallet import TraderWallet
from services.users_vault import UsersVault


def test_fee_rate_is_capped(ledger):
    owner = ledger.new_address()

    with pytest.raises(FeeRateError):
        ContractsFactory.deploy(ledger, owner, fee_rate=MAX_FEE_RATE + 1)

    factory = ContractsFactory.deploy(ledger, owner, fee_rate=e18(3))
    assert factory.fee_rate() == e18(3)

    factory.set_fee_rate(owner, MAX_FEE_RATE)
    assert factory.fee_rate() == MAX_FEE_RATE
    with pytest.raises(FeeRateError):
        factory.set_fee_rate(owner, MAX_FEE_RATE + 1)
    with pytest.raises(NotOwner):
        factory.set_fee_rate(ledger.new_address(), e18(1))
    assert factory.fee_rate() == MAX_FEE_RATE


def test_allow_lists(deployment):
    d = deployment
    investor = d.ledger.new_address()

    assert not d.factory.is_investor_allowed(investor)
    d.factory.add_investor(d.owner, investor)
    assert d.factory.is_investor_allowed(investor)
    d.factory.remove_investor(d.owner, investor)
    assert not d.factory.is_investor_allowed(investor)

    with pytest.raises(NotOwner):
        d.factory.add_trader(investor, investor)

    assert d.factory.is_trader_allowed(d.trader)
    assert d.factory.is_trader_wallet_allowed(d.wallet.address)
    assert d.factory.is_vault_allowed(d.vault.address)
    assert not d.factory.is_vault_allowed(d.wallet.address)


def test_create_trader_wallet(deployment):
    d = deployment
    dynamic_value = d.ledger.new_address()

    with pytest.raises(TraderNotAllowed):
        d.factory.create_trader_wallet(d.owner, d.usdc.address, d.outsider, dynamic_value, d.owner)

    wallet = d.factory.create_trader_wallet(d.owner, d.usdc.address, d.trader, dynamic_value, d.owner)

    assert isinstance(d.ledger.get(wallet.address), TraderWallet)
    assert d.factory.is_trader_wallet_allowed(wallet.address)
    state = wallet.state()
    assert state.adapters_registry_address == d.registry.address
    assert state.contracts_factory_address == d.factory.address
    assert state.vault_address == ZERO_ADDRESS

    deployed = d.ledger.events(event="TraderWalletDeployed")[0]
    assert deployed.args["trader_wallet"] == wallet.address
    assert deployed.args["trader"] == d.trader


def test_create_users_vault(deployment):
    d = deployment

    with pytest.raises(InvalidTraderWallet):
        d.factory.create_users_vault(d.owner, d.usdc.address, d.outsider, d.owner)

    vault = d.factory.create_users_vault(
        d.owner, d.usdc.address, d.wallet.address, d.owner, "Copy Shares", "CPS"
    )

    assert isinstance(d.ledger.get(vault.address), UsersVault)
    assert d.factory.is_vault_allowed(vault.address)
    assert vault.name() == "Copy Shares"
    assert vault.symbol() == "CPS"
    assert vault.decimals() == d.usdc.decimals()
    assert vault.current_round() == 0


def test_contracts_validate_addresses_on_deploy(deployment):
    d = deployment

    with pytest.raises(ZeroAddress) as exc:
        UsersVault.deploy(
            d.ledger,
            d.owner,
            ZERO_ADDRESS,
            d.registry.address,
            d.factory.address,
            d.wallet.address,
            d.owner,
            "Shares",
            "SHR",
        )
    assert exc.value.args == ("underlying_token",)

    with pytest.raises(ZeroAddress) as exc:
        TraderWallet.deploy(
            d.ledger,
            d.owner,
            d.usdc.address,
            d.registry.address,
            d.factory.address,
            d.trader,
            ZERO_ADDRESS,
            d.owner,
        )
    assert exc.value.args == ("dynamic_value",)


def test_adapters_registry(ledger):
    owner = ledger.new_address()
    adapter = ledger.new_address()
    registry = AdaptersRegistry.deploy(ledger, owner)

    assert not registry.is_adapter_allowed(GMX_PROTOCOL_ID)
    assert registry.get_adapter_address(GMX_PROTOCOL_ID) == ZERO_ADDRESS

    with pytest.raises(NotOwner):
        registry.set_adapter(adapter, GMX_PROTOCOL_ID, adapter)
    with pytest.raises(ZeroAddress):
        registry.set_adapter(owner, GMX_PROTOCOL_ID, ZERO_ADDRESS)

    registry.set_adapter(owner, GMX_PROTOCOL_ID, adapter)
    assert registry.is_adapter_allowed(GMX_PROTOCOL_ID)
    assert registry.get_adapter_address(GMX_PROTOCOL_ID) == adapter
    assert not registry.is_adapter_allowed(UNISWAP_PROTOCOL_ID)

    replacement = ledger.new_address()
    registry.set_adapter(owner, GMX_PROTOCOL_ID, replacement)
    assert registry.get_adapter_address(GMX_PROTOCOL_ID) == replacement

    registry.remove_adapter(owner, GMX_PROTOCOL_ID)
    assert not registry.is_adapter_allowed(GMX_PROTOCOL_ID)
