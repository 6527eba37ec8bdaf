from typing import List

import numpy as np
import pandas as pd

from core.constants import PRICE_DENOMINATOR
from models import PricePerShareHistory
from schemas import VaultPerformance


def calculate_roi(after: float, before: float, days: int) -> float:
    # calculate our annualized return for a vault
    pps_delta = (after - before) / (before or 1)
    annualized_roi = (1 + pps_delta) ** (365.2425 / days) - 1
    return annualized_roi


def calculate_risk_factor(returns):
    # Filter out positive returns
    negative_returns = [r for r in returns if r < 0]

    # Calculate standard deviation of negative returns
    risk_factor = np.std(negative_returns) if negative_returns else 0.0

    if np.isnan(risk_factor) or np.isinf(risk_factor):
        risk_factor = 0
    return float(risk_factor)


def calculate_max_drawdown(pps: pd.Series) -> float:
    drawdown = pps / pps.cummax() - 1
    return float(drawdown.min())


def pps_frame(history: List[PricePerShareHistory]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "round": h.round,
                "datetime": pd.Timestamp(h.datetime),
                "pps": h.assets_per_share / PRICE_DENOMINATOR,
            }
            for h in history
        ],
        columns=["round", "datetime", "pps"],
    )
    df = df.sort_values("round").reset_index(drop=True)
    df["return"] = df["pps"].pct_change().fillna(0.0)
    return df


def calculate_vault_performance(vault_address: str, history: List[PricePerShareHistory]) -> VaultPerformance:
    df = pps_frame(history)
    if df.empty:
        return VaultPerformance(
            vault_address=vault_address,
            rounds=0,
            last_assets_per_share=PRICE_DENOMINATOR,
            last_round_return=0.0,
            cumulative_return=0.0,
            max_drawdown=0.0,
            risk_factor=0.0,
        )

    first, last = df.iloc[0], df.iloc[-1]
    days = (last["datetime"] - first["datetime"]).days
    return VaultPerformance(
        vault_address=vault_address,
        rounds=len(df),
        last_assets_per_share=history[-1].assets_per_share
        if history[-1].round == last["round"]
        else int(last["pps"] * PRICE_DENOMINATOR),
        last_round_return=float(last["return"]),
        cumulative_return=float(last["pps"] / first["pps"] - 1),
        max_drawdown=calculate_max_drawdown(df["pps"]),
        risk_factor=calculate_risk_factor(df["return"].tolist()),
        apy=calculate_roi(last["pps"], first["pps"], days) if days > 0 else None,
        since=first["datetime"].to_pydatetime(),
        until=last["datetime"].to_pydatetime(),
    )
