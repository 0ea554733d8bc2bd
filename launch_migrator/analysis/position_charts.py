#!/usr/bin/env python3
"""
Migration Position Charts

Visualizes the positions created by a migration over the tick axis and
how the sized amounts respond to the clearing price across a sweep.
"""

from pathlib import Path
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..engine.orchestrator import MigrationResult
from .price_sweep import extract_positions

KIND_LABELS = {
    "full_range": "Full Range",
    "above": "One-Sided (above price)",
    "below": "One-Sided (below price)"
}


class PositionChartGenerator:
    """Charts for a single migration and for price sweeps"""

    def __init__(self):
        self._setup_styling()

    def _setup_styling(self):
        """Setup chart styling"""
        sns.set_theme(style="whitegrid")
        plt.rcParams.update({
            'figure.figsize': (12, 8),
            'font.size': 11,
            'axes.titlesize': 14,
            'axes.labelsize': 12,
            'legend.fontsize': 10
        })

    def plot_positions(self, result: MigrationResult, tick_spacing: int, chart_path: Path) -> Path:
        """Horizontal bars, one per position, spanning its tick range"""
        positions = extract_positions(result.payload, tick_spacing)
        if not positions:
            raise ValueError("Migration result contains no positions")

        chart_path = Path(chart_path)
        chart_path.parent.mkdir(parents=True, exist_ok=True)

        palette = sns.color_palette("deep", len(KIND_LABELS))
        colors = dict(zip(KIND_LABELS, palette))

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 6))
        fig.suptitle(f"Migrated Positions - pool {result.pool_id[:10]}…", fontsize=16, fontweight='bold')

        # Chart 1: tick ranges
        for i, position in enumerate(positions):
            ax1.barh(
                i,
                position["tick_upper"] - position["tick_lower"],
                left=position["tick_lower"],
                color=colors[position["kind"]],
                alpha=0.8,
                label=KIND_LABELS[position["kind"]]
            )
        ax1.axvline(x=result.initial_tick, color='red', linestyle='--', alpha=0.7, label='Initial Tick')
        ax1.set_yticks(range(len(positions)))
        ax1.set_yticklabels([f"#{i + 1}" for i in range(len(positions))])
        ax1.set_xlabel("Tick")
        ax1.set_title("Position Ranges")
        handles, labels = ax1.get_legend_handles_labels()
        unique = dict(zip(labels, handles))
        ax1.legend(unique.values(), unique.keys(), loc='best')

        # Chart 2: liquidity per position (log scale, values exceed float64 integers)
        liquidity = np.array([float(p["liquidity"]) for p in positions])
        ax2.bar(
            [f"#{i + 1}" for i in range(len(positions))],
            liquidity,
            color=[colors[p["kind"]] for p in positions],
            alpha=0.8
        )
        ax2.set_yscale('log')
        ax2.set_ylabel("Liquidity")
        ax2.set_title("Liquidity per Position")

        plt.tight_layout()
        fig.savefig(chart_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return chart_path

    def plot_price_sweep(self, df: pd.DataFrame, chart_path: Path) -> Optional[Path]:
        """Sized amounts and leftover currency against the clearing price"""
        succeeded = df[df["error"].isna()]
        if succeeded.empty:
            return None

        chart_path = Path(chart_path)
        chart_path.parent.mkdir(parents=True, exist_ok=True)

        prices = succeeded["clearing_price_float"].astype(float)
        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10), sharex=True)
        fig.suptitle("Migration Sizing vs Clearing Price", fontsize=16, fontweight='bold')

        ax1.plot(prices, succeeded["token_amount"].astype(float), marker='o', label='Token Amount')
        ax1.plot(prices, succeeded["currency_amount"].astype(float), marker='s', label='Currency Amount')
        ax1.plot(prices, succeeded["leftover_currency"].astype(float), linestyle='--', label='Leftover Currency')
        ax1.set_ylabel("Amount")
        ax1.set_title("Sized Amounts")
        ax1.legend(loc='best')

        ax2.plot(prices, succeeded["positions"].astype(int), drawstyle='steps-mid', color='purple')
        ax2.set_xscale('log')
        ax2.set_xlabel("Clearing Price (currency per token)")
        ax2.set_ylabel("Positions")
        ax2.set_title("Positions Created")

        plt.tight_layout()
        fig.savefig(chart_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return chart_path


def plot_positions(result: MigrationResult, tick_spacing: int, chart_path: Path) -> Path:
    return PositionChartGenerator().plot_positions(result, tick_spacing, chart_path)


def plot_price_sweep(df: pd.DataFrame, chart_path: Path) -> Optional[Path]:
    return PositionChartGenerator().plot_price_sweep(df, chart_path)


def chart_files(charts_dir: Path) -> List[Path]:
    return sorted(Path(charts_dir).glob("*.png"))
