"""Round accounting shared by the users vault and the trader wallet.

Everything here is a pure function of integers, the contracts load state, call these and
store the results.
"""

from typing import Callable, NamedTuple, Tuple

from core.constants import INITIAL_ASSETS_PER_SHARE, PRICE_DENOMINATOR, RATIO_DENOMINATOR
from core.errors import InsufficientAssets, InvalidRollover
from utils.calculate_price import assets_from_shares, mul_div, shares_from_assets


class VaultSettlement(NamedTuple):
    pool: int
    price: int
    profit: int
    minted_shares: int
    burned_shares: int
    redeemed_assets: int
    initial_balance: int


def ensure_rollover_allowed(*amounts: int) -> None:
    # pending flows and trading deltas of both sides, nothing moved means nothing to close
    if not any(amounts):
        raise InvalidRollover()


def compute_pool(balance: int, pending_deposit_assets: int, processed_withdraw_assets: int) -> int:
    pool = balance - pending_deposit_assets - processed_withdraw_assets
    if pool < 0:
        raise InsufficientAssets(balance, pending_deposit_assets, processed_withdraw_assets)
    return pool


def compute_round_price(current_round: int, pool: int, total_supply: int) -> int:
    if current_round == 0 or total_supply == 0:
        return INITIAL_ASSETS_PER_SHARE
    return pool * PRICE_DENOMINATOR // total_supply


def settle_vault_round(
    current_round: int,
    balance: int,
    pending_deposit_assets: int,
    pending_withdraw_shares: int,
    processed_withdraw_assets: int,
    total_supply: int,
    initial_vault_balance: int,
) -> VaultSettlement:
    pool = compute_pool(balance, pending_deposit_assets, processed_withdraw_assets)
    profit = 0 if current_round == 0 else pool - initial_vault_balance
    price = compute_round_price(current_round, pool, total_supply)
    minted_shares = shares_from_assets(pending_deposit_assets, price)
    redeemed_assets = assets_from_shares(pending_withdraw_shares, price)
    return VaultSettlement(
        pool=pool,
        price=price,
        profit=profit,
        minted_shares=minted_shares,
        burned_shares=pending_withdraw_shares,
        redeemed_assets=redeemed_assets,
        initial_balance=pool + pending_deposit_assets - redeemed_assets,
    )


def compute_trader_pool(balance: int, cumulative_pending_deposits: int) -> int:
    pool = balance - cumulative_pending_deposits
    if pool < 0:
        raise InsufficientAssets(balance, cumulative_pending_deposits)
    return pool


def split_profit(trader_delta: int, vault_delta: int, ratio_proportions: int) -> Tuple[int, int]:
    """Split the combined result of a round by the capital proportion of the two sides.

    ``ratio_proportions`` is vault capital over trader capital (1e18 fixed point), so the
    trader's part is ``1 / (1 + ratio)`` of the total. Losses split the same way.
    """
    combined = trader_delta + vault_delta
    trader_profit = mul_div(combined, RATIO_DENOMINATOR, RATIO_DENOMINATOR + ratio_proportions)
    return trader_profit, combined - trader_profit


def compute_ratio(initial_vault_balance: int, initial_trader_balance: int) -> int:
    if initial_trader_balance <= 0:
        return 0
    return initial_vault_balance * RATIO_DENOMINATOR // initial_trader_balance


def reconcile_deposit(
    entry_round: int,
    pending_assets: int,
    unclaimed_shares: int,
    current_round: int,
    price_of: Callable[[int], int],
) -> Tuple[int, int, int]:
    """Convert pending assets of a closed round into claimable shares.

    Returns ``(round, pending_assets, unclaimed_shares)`` with ``round == current_round``.
    """
    if entry_round < current_round and pending_assets > 0:
        unclaimed_shares += shares_from_assets(pending_assets, price_of(entry_round))
        pending_assets = 0
    return current_round, pending_assets, unclaimed_shares


def reconcile_withdrawal(
    entry_round: int,
    pending_shares: int,
    unclaimed_assets: int,
    current_round: int,
    price_of: Callable[[int], int],
) -> Tuple[int, int, int]:
    if entry_round < current_round and pending_shares > 0:
        unclaimed_assets += assets_from_shares(pending_shares, price_of(entry_round))
        pending_shares = 0
    return current_round, pending_shares, unclaimed_assets
