from datetime import datetime, timedelta

import pytest

from core.constants import AMOUNT_1E18
from models import PricePerShareHistory
from services.performance import calculate_max_drawdown, calculate_risk_factor, calculate_vault_performance, pps_frame

VAULT = "0x000000000000000000000000000000000000dEaD"


def make_history(prices):
    start = datetime(2024, 3, 1)
    return [
        PricePerShareHistory(
            vault_address=VAULT,
            round=i,
            assets_per_share=int(price * 100) * AMOUNT_1E18 // 100,
            datetime=start + timedelta(days=7 * i),
        )
        for i, price in enumerate(prices)
    ]


def test_pps_frame_is_sorted_by_round():
    history = make_history([1.0, 1.1, 0.99, 1.2])

    df = pps_frame(list(reversed(history)))

    assert df["round"].tolist() == [0, 1, 2, 3]
    assert df["return"].iloc[0] == 0.0
    assert df["return"].iloc[1] == pytest.approx(0.1)


def test_vault_performance():
    history = make_history([1.0, 1.1, 0.99, 1.2])

    performance = calculate_vault_performance(VAULT, history)

    assert performance.rounds == 4
    assert performance.last_assets_per_share == 12 * 10**17
    assert performance.cumulative_return == pytest.approx(0.2)
    assert performance.max_drawdown == pytest.approx(0.99 / 1.1 - 1)
    assert performance.last_round_return == pytest.approx(1.2 / 0.99 - 1)
    # a single losing round has no spread
    assert performance.risk_factor == 0.0
    assert performance.apy > 0.2
    assert (performance.until - performance.since).days == 21


def test_vault_performance_without_history():
    performance = calculate_vault_performance(VAULT, [])

    assert performance.rounds == 0
    assert performance.last_assets_per_share == AMOUNT_1E18
    assert performance.apy is None
    assert performance.since is None


def test_max_drawdown_and_risk_factor():
    history = make_history([1.0, 0.9, 0.8, 1.0])
    df = pps_frame(history)

    assert calculate_max_drawdown(df["pps"]) == pytest.approx(-0.2)
    assert calculate_risk_factor(df["return"].tolist()) == pytest.approx(0.0055555, rel=1e-3)
    assert calculate_risk_factor([0.1, 0.2]) == 0.0
