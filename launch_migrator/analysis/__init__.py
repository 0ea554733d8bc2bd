"""Price sweeps, position charts and results storage"""

from .price_sweep import (
    run_price_sweep, sweep_statistics, extract_positions, summarize_result,
    price_grid, q96_to_float, float_to_q96, sqrt_price_x96_to_price
)
from .position_charts import PositionChartGenerator, plot_positions, plot_price_sweep
from .results_manager import ResultsManager, RunMetadata

__all__ = [
    "run_price_sweep", "sweep_statistics", "extract_positions", "summarize_result",
    "price_grid", "q96_to_float", "float_to_q96", "sqrt_price_x96_to_price",
    "PositionChartGenerator", "plot_positions", "plot_price_sweep",
    "ResultsManager", "RunMetadata"
]
