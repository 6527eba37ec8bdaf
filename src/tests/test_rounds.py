import pytest

from core.constants import AMOUNT_1E18
from core.errors import InsufficientAssets, InvalidRollover
from services import rounds


def e18(value: int) -> int:
    return value * AMOUNT_1E18


def test_round_zero_settles_at_initial_price():
    settlement = rounds.settle_vault_round(
        current_round=0,
        balance=e18(100),
        pending_deposit_assets=e18(100),
        pending_withdraw_shares=0,
        processed_withdraw_assets=0,
        total_supply=0,
        initial_vault_balance=0,
    )

    assert settlement.pool == 0
    assert settlement.price == AMOUNT_1E18
    assert settlement.profit == 0
    assert settlement.minted_shares == e18(100)
    assert settlement.initial_balance == e18(100)


def test_gain_raises_price_for_new_deposits():
    settlement = rounds.settle_vault_round(
        current_round=1,
        balance=e18(420),
        pending_deposit_assets=e18(200),
        pending_withdraw_shares=0,
        processed_withdraw_assets=0,
        total_supply=e18(200),
        initial_vault_balance=e18(200),
    )

    assert settlement.pool == e18(220)
    assert settlement.price == 11 * 10**17
    assert settlement.profit == e18(20)
    assert settlement.minted_shares == 181818181818181818181
    assert settlement.initial_balance == e18(420)


def test_withdraw_shares_are_redeemed_at_round_price():
    settlement = rounds.settle_vault_round(
        current_round=2,
        balance=e18(1000),
        pending_deposit_assets=0,
        pending_withdraw_shares=e18(100),
        processed_withdraw_assets=0,
        total_supply=e18(500),
        initial_vault_balance=e18(1000),
    )

    assert settlement.price == e18(2)
    assert settlement.burned_shares == e18(100)
    assert settlement.redeemed_assets == e18(200)
    assert settlement.initial_balance == e18(800)
    assert settlement.profit == 0


def test_processed_assets_are_excluded_from_the_pool():
    assert rounds.compute_pool(e18(300), e18(50), e18(100)) == e18(150)

    with pytest.raises(InsufficientAssets):
        rounds.compute_pool(e18(50), e18(100), 0)


def test_empty_supply_prices_at_one():
    assert rounds.compute_round_price(3, e18(10), 0) == AMOUNT_1E18
    assert rounds.compute_round_price(0, e18(10), e18(5)) == AMOUNT_1E18
    assert rounds.compute_round_price(3, e18(10), e18(5)) == e18(2)


def test_split_profit_follows_capital_proportion():
    assert rounds.split_profit(e18(50), e18(250), e18(5)) == (e18(50), e18(250))
    assert rounds.split_profit(e18(-60), 0, e18(2)) == (e18(-20), e18(-40))
    # the rounding remainder goes to the vault
    assert rounds.split_profit(-7, 0, AMOUNT_1E18) == (-3, -4)
    assert rounds.split_profit(0, 0, e18(5)) == (0, 0)


def test_compute_ratio():
    assert rounds.compute_ratio(e18(5000), e18(1000)) == e18(5)
    assert rounds.compute_ratio(e18(5000), e18(700)) == 7142857142857142857
    assert rounds.compute_ratio(e18(5000), 0) == 0


def test_reconcile_deposit_converts_only_closed_rounds():
    def price_of(round):
        return e18(2)

    assert rounds.reconcile_deposit(1, e18(50), 0, 1, price_of) == (1, e18(50), 0)
    assert rounds.reconcile_deposit(0, e18(100), 5, 1, price_of) == (1, 0, 5 + e18(50))
    assert rounds.reconcile_deposit(0, 0, 5, 3, price_of) == (3, 0, 5)


def test_reconcile_withdrawal_converts_only_closed_rounds():
    def price_of(round):
        return 11 * 10**17

    assert rounds.reconcile_withdrawal(2, e18(10), 0, 2, price_of) == (2, e18(10), 0)
    assert rounds.reconcile_withdrawal(1, e18(10), 1, 2, price_of) == (2, 0, 1 + e18(11))


def test_rollover_needs_some_activity():
    with pytest.raises(InvalidRollover):
        rounds.ensure_rollover_allowed(0, 0, 0, 0, 0, 0)

    rounds.ensure_rollover_allowed(0, 0, 0, 0, 0, -1)
    rounds.ensure_rollover_allowed(1, 0, 0, 0, 0, 0)
