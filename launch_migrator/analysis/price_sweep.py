#!/usr/bin/env python3
"""
Clearing Price Sweep

Runs a fresh migration scenario for each clearing price and tabulates
what the migration derives: pool price and tick, sized amounts, leftover
currency, liquidity and which positions were actually created.
"""

import logging
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from ..core.actions import Action, decode_mint_position, decode_unlock_data
from ..core.exceptions import LaunchMigratorError
from ..core.tick_calculator import PositionSide, full_range_bounds
from ..core.tick_math import Q96
from ..engine.config import MigrationConfig
from ..engine.orchestrator import MigrationResult
from ..simulation.scenario import MigrationScenario

logger = logging.getLogger(__name__)

SWEEP_COLUMNS = [
    "clearing_price", "clearing_price_float", "sqrt_price_x96", "pool_price_float", "tick",
    "token_amount", "currency_amount", "leftover_currency", "liquidity",
    "positions", "token_position", "currency_position", "error"
]


def q96_to_float(value: int) -> float:
    """Q96 fixed point to float"""
    return float(np.float64(value) / np.float64(Q96))


def float_to_q96(value: float) -> int:
    """Float to Q96 fixed point (rounded to the nearest representable integer)"""
    if value <= 0:
        raise ValueError(f"Price must be positive, got {value}")
    return int(np.round(np.float64(value) * np.float64(Q96)))


def sqrt_price_x96_to_price(sqrt_price_x96: int) -> float:
    """Pool price token1/token0 as a float"""
    return q96_to_float(sqrt_price_x96) ** 2


def price_grid(start: float, stop: float, num: int) -> List[int]:
    """Geometrically spaced Q96 clearing prices between two float prices"""
    if num < 1:
        raise ValueError("num must be at least 1")
    return [float_to_q96(p) for p in np.geomspace(start, stop, num)]


def extract_positions(payload: bytes, tick_spacing: int) -> List[Dict]:
    """
    Decode the MINT actions of an encoded plan.

    Each position is labelled full_range, above (currency0 only) or
    below (currency1 only).
    """
    full_range = full_range_bounds(tick_spacing)
    actions, params = decode_unlock_data(payload)

    positions = []
    for action, param in zip(actions, params):
        if action != Action.MINT_POSITION:
            continue
        mint = decode_mint_position(param)
        if (mint["tick_lower"], mint["tick_upper"]) == (full_range.lower, full_range.upper):
            kind = "full_range"
        elif mint["amount1_max"] == 0:
            kind = PositionSide.ABOVE.value
        else:
            kind = PositionSide.BELOW.value

        positions.append({
            "kind": kind,
            "tick_lower": mint["tick_lower"],
            "tick_upper": mint["tick_upper"],
            "liquidity": mint["liquidity"],
            "amount0_max": mint["amount0_max"],
            "amount1_max": mint["amount1_max"]
        })
    return positions


def _one_sided_flags(positions: List[Dict], token_is_currency0: bool) -> Dict[str, bool]:
    kinds = {p["kind"] for p in positions}
    token_side = PositionSide.ABOVE.value if token_is_currency0 else PositionSide.BELOW.value
    currency_side = PositionSide.BELOW.value if token_is_currency0 else PositionSide.ABOVE.value
    return {"token_position": token_side in kinds, "currency_position": currency_side in kinds}


def summarize_result(result: MigrationResult, tick_spacing: int, pool_token: str) -> Dict:
    """Flatten a migration result into one sweep row"""
    positions = extract_positions(result.payload, tick_spacing)
    row = {
        "clearing_price": None,
        "clearing_price_float": None,
        "sqrt_price_x96": result.data.sqrt_price_x96,
        "pool_price_float": sqrt_price_x96_to_price(result.data.sqrt_price_x96),
        "tick": result.initial_tick,
        "token_amount": result.data.token_amount,
        "currency_amount": result.data.currency_amount,
        "leftover_currency": result.data.leftover_currency,
        "liquidity": result.data.liquidity,
        "positions": len(positions),
        "error": None
    }
    row.update(_one_sided_flags(positions, result.pool_key.currency0 == pool_token))
    return row


def run_price_sweep(
    config: MigrationConfig,
    prices: Iterable[int],
    currency_raised: int,
    verbose: bool = False
) -> pd.DataFrame:
    """
    Migrate once per clearing price, each in a fresh environment.

    Args:
        config: Migration configuration shared by every run
        prices: Q96 clearing prices
        currency_raised: Currency raised by the auction in every run
        verbose: Print one line per run

    Returns:
        DataFrame with one row per price; failed migrations carry the error
    """
    rows = []
    for price in prices:
        scenario = MigrationScenario(config)
        try:
            result = scenario.run(price, currency_raised)
            row = summarize_result(result, config.tick_spacing, scenario.orchestrator.pool_token)
        except LaunchMigratorError as e:
            logger.info("Migration at price %d failed: %s", price, e)
            row = {column: None for column in SWEEP_COLUMNS}
            row["error"] = type(e).__name__

        row["clearing_price"] = price
        row["clearing_price_float"] = q96_to_float(price)
        rows.append(row)

        if verbose:
            status = row["error"] or f"{row['positions']} positions"
            print(f"  price {row['clearing_price_float']:.6g}: {status}")

    return pd.DataFrame(rows, columns=SWEEP_COLUMNS)


def sweep_statistics(df: pd.DataFrame) -> Dict[str, Optional[float]]:
    """Aggregate view of a sweep table"""
    succeeded = df[df["error"].isna()]
    return {
        "runs": len(df),
        "successful_runs": len(succeeded),
        "failed_runs": len(df) - len(succeeded),
        "token_position_rate": float(succeeded["token_position"].astype(bool).mean()) if len(succeeded) else None,
        "currency_position_rate": float(succeeded["currency_position"].astype(bool).mean()) if len(succeeded) else None,
        "max_leftover_currency": int(succeeded["leftover_currency"].max()) if len(succeeded) else None
    }
