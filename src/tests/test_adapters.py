from unittest.mock import patch

import pytest

from conftest import e18
from core.constants import AMOUNT_1E18, GMX_PROTOCOL_ID, UNISWAP_PROTOCOL_ID
from core.errors import AdapterOperationFailed, InvalidSlippage, NotOwner, TokenTransferFailed
from services.adapters.perpetuals import PerpetualsAdapter
from services.adapters.spot_swap import SpotSwapAdapter
from services.token import ERC20Token

TENTH = AMOUNT_1E18 // 10


@pytest.fixture()
def funded(deployment):
    d = deployment
    d.fund(d.trader, e18(1000))
    d.wallet.trader_deposit(d.trader, e18(1000))
    return d


def execute(d, protocol_id, operation):
    return d.wallet.execute_on_protocol(d.trader, protocol_id, operation, False)


def test_spot_sell_exact_input(funded):
    d = funded
    execute(d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.buy(d.usdc.address, d.weth.address, TENTH, e18(202)))
    usdc_before = d.usdc.balance_of(d.wallet.address)

    result = execute(
        d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.sell(d.weth.address, d.usdc.address, TENTH, e18(198))
    )

    # 200 quoted, 30 bps pool fee
    assert result.balance_delta == 1994 * AMOUNT_1E18 // 10
    assert d.usdc.balance_of(d.wallet.address) == usdc_before + 1994 * AMOUNT_1E18 // 10
    assert d.weth.balance_of(d.wallet.address) == 0


def test_spot_sell_below_minimum_fails(funded):
    d = funded
    execute(d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.buy(d.usdc.address, d.weth.address, TENTH, e18(202)))

    with pytest.raises(AdapterOperationFailed):
        execute(
            d,
            UNISWAP_PROTOCOL_ID,
            SpotSwapAdapter.sell(d.weth.address, d.usdc.address, TENTH, 1998 * AMOUNT_1E18 // 10),
        )


def test_spot_without_balance_or_price_fails(funded):
    d = funded
    unknown = d.ledger.new_address()

    with pytest.raises(AdapterOperationFailed):
        execute(d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.sell(d.weth.address, d.usdc.address, TENTH, e18(198)))
    with pytest.raises(AdapterOperationFailed):
        execute(d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.buy(d.usdc.address, unknown, TENTH, e18(202)))


def test_spot_slippage_allowance_is_owner_managed(deployment):
    d = deployment

    with pytest.raises(NotOwner):
        d.spot.set_slippage_allowance(d.trader, 0, AMOUNT_1E18)
    with pytest.raises(InvalidSlippage):
        d.spot.set_slippage_allowance(d.owner, e18(1), 0)

    d.spot.set_slippage_allowance(d.owner, 0, AMOUNT_1E18)
    assert d.spot.state().slippage_allowance_max == AMOUNT_1E18


def test_perp_leverage_is_bounded(funded):
    d = funded

    with pytest.raises(AdapterOperationFailed):
        execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(10), e18(600), True, e18(2100)))
    with pytest.raises(AdapterOperationFailed):
        execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(50), True, e18(2100)))

    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(10), e18(500), True, e18(2100)))
    assert d.perps.position(d.wallet.address, d.weth.address, True).size == e18(500)


def test_perp_acceptable_price(funded):
    d = funded

    with pytest.raises(AdapterOperationFailed):
        execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(1900)))

    # shorts want a price at or above their limit
    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), False, e18(1900)))
    assert d.perps.position(d.wallet.address, d.weth.address, False).collateral == e18(100)


def test_perp_entry_price_is_averaged(funded):
    d = funded
    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(2100)))
    d.perps.set_price(d.owner, d.weth.address, e18(2200))

    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(2300)))

    position = d.perps.position(d.wallet.address, d.weth.address, True)
    assert position.size == e18(1000)
    assert position.collateral == e18(200)
    assert position.entry_price == e18(2100)


def test_perp_loss_is_taken_from_collateral(funded):
    d = funded
    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(2100)))
    d.perps.set_price(d.owner, d.weth.address, e18(1800))

    result = execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.decrease(d.weth.address, 0, e18(500), True, e18(1700)))

    assert result.balance_delta == e18(50)
    assert d.usdc.balance_of(d.wallet.address) == e18(950)


def test_perp_partial_decrease(funded):
    d = funded
    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(2100)))

    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.decrease(d.weth.address, e18(40), e18(200), True, e18(1900)))

    position = d.perps.position(d.wallet.address, d.weth.address, True)
    assert position.size == e18(300)
    assert position.collateral == e18(60)
    assert d.usdc.balance_of(d.wallet.address) == e18(940)

    # nothing left to close on the short side
    with pytest.raises(AdapterOperationFailed):
        execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.decrease(d.weth.address, 0, e18(100), False, e18(2100)))


def test_keeper_fills_triggered_orders(funded):
    d = funded
    execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.create_order(d.weth.address, e18(100), e18(300), True, e18(1900)))

    with pytest.raises(NotOwner):
        d.perps.execute_increase_order(d.trader, d.wallet.address, 0)
    assert d.perps.execute_increase_order(d.owner, d.wallet.address, 0) is False

    d.perps.set_price(d.owner, d.weth.address, e18(1900))
    assert d.perps.execute_increase_order(d.owner, d.wallet.address, 0) is True

    position = d.perps.position(d.wallet.address, d.weth.address, True)
    assert (position.size, position.collateral, position.entry_price) == (e18(300), e18(100), e18(1900))
    assert d.perps.order(d.wallet.address, 0).executed

    # filled orders can no longer be cancelled
    with pytest.raises(AdapterOperationFailed):
        execute(d, GMX_PROTOCOL_ID, PerpetualsAdapter.cancel(0))


def test_failed_token_transfers_revert_the_operation(funded):
    d = funded

    with patch.object(ERC20Token, "transfer", return_value=False):
        with pytest.raises(TokenTransferFailed):
            execute(d, UNISWAP_PROTOCOL_ID, SpotSwapAdapter.buy(d.usdc.address, d.weth.address, TENTH, e18(202)))
        with pytest.raises(TokenTransferFailed):
            execute(
                d, GMX_PROTOCOL_ID, PerpetualsAdapter.increase(d.weth.address, e18(100), e18(500), True, e18(2100))
            )

    assert d.usdc.balance_of(d.wallet.address) == e18(1000)
    assert d.weth.balance_of(d.wallet.address) == 0
    assert d.perps.position(d.wallet.address, d.weth.address, True).size == 0
