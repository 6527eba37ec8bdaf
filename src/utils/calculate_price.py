from core.constants import PRICE_DENOMINATOR
from core.errors import InvariantViolation


def shares_from_assets(assets: int, assets_per_share: int) -> int:
    if assets_per_share == 0:
        raise InvariantViolation("zero assets per share")
    return assets * PRICE_DENOMINATOR // assets_per_share


def assets_from_shares(shares: int, assets_per_share: int) -> int:
    return shares * assets_per_share // PRICE_DENOMINATOR


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator, truncated toward zero for signed operands."""
    if denominator == 0:
        raise InvariantViolation("zero denominator")
    product = a * b
    quotient = abs(product) // abs(denominator)
    if (product < 0) != (denominator < 0):
        return -quotient
    return quotient


def calculate_avg_entry_price(size: int, entry_price: int, size_delta: int, price: int) -> int:
    # size weighted, sizes are in underlying units so the weights are notional
    if size + size_delta == 0:
        return 0
    return (size * entry_price + size_delta * price) // (size + size_delta)
