"""Image charts of backtest results: equity curve, drawdown and monthly returns."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from matplotlib.axes import Axes
from matplotlib.figure import Figure

from tradecalc.backtester import BacktestResult

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class ChartConfig:
    """Appearance and destination of generated charts."""

    format: str = "png"
    width: int = 1200
    height: int = 800
    dpi: int = 100
    dark_mode: bool = False
    output_dir: str = "exports/charts"


def _monthly_matrix(
    monthly_returns: Mapping[tuple[int, int], float],
) -> tuple[list[int], list[list[float]]]:
    """Years in order and a year-by-month grid of returns in percent, NaN where missing."""
    years = sorted({year for year, _ in monthly_returns})
    row_of = {year: row for row, year in enumerate(years)}
    grid = [[math.nan] * 12 for _ in years]
    for (year, month), value in monthly_returns.items():
        if 1 <= month <= 12:
            grid[row_of[year]][month - 1] = value * 100.0
    return years, grid


class EquityCurveGenerator:
    """Draws backtest results into image files in the configured directory."""

    def __init__(self, config: Optional[ChartConfig] = None) -> None:
        self.config = config if config is not None else ChartConfig()

    @property
    def config(self) -> ChartConfig:
        return self._config

    @config.setter
    def config(self, value: ChartConfig) -> None:
        self._config = value
        Path(value.output_dir).mkdir(parents=True, exist_ok=True)

    def _new_figure(self) -> tuple[Figure, Axes]:
        cfg = self._config
        figure = Figure(figsize=(cfg.width / cfg.dpi, cfg.height / cfg.dpi), dpi=cfg.dpi)
        axes = figure.add_subplot(1, 1, 1)
        return figure, axes

    def _apply_style(self, figure: Figure, axes: Axes) -> None:
        if self._config.dark_mode:
            figure.set_facecolor("k")
            axes.set_facecolor("k")
            for spine in axes.spines.values():
                spine.set_color("w")
            axes.tick_params(colors="w")
            axes.xaxis.label.set_color("w")
            axes.yaxis.label.set_color("w")
            axes.title.set_color("w")
            legend = axes.get_legend()
            if legend is not None:
                for text in legend.get_texts():
                    text.set_color("w")
            axes.grid(True, color="gray")
        else:
            axes.grid(True)

    def _save(self, figure: Figure, strategy_name: str, kind: str) -> str:
        cfg = self._config
        stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime())
        path = Path(cfg.output_dir) / f"{strategy_name}_{kind}_{stamp}.{cfg.format}"
        figure.savefig(path, format=cfg.format, dpi=cfg.dpi, facecolor=figure.get_facecolor())
        return str(path)

    def generate_equity_curve(self, strategy_name: str, result: BacktestResult) -> Optional[str]:
        """Plot the equity curve; return the image path, or None without data."""
        curve: Sequence[float] = result.equity_curve
        if not curve:
            logger.warning("Empty equity curve data for strategy: %s", strategy_name)
            return None

        figure, axes = self._new_figure()
        axes.plot(range(len(curve)), curve, linewidth=2, color="blue")
        axes.axhline(curve[0], linewidth=1, color="gray", linestyle="--")
        axes.set_title(f"Equity Curve: {strategy_name}")
        axes.set_xlabel("Trade Number")
        axes.set_ylabel("Account Equity")
        self._apply_style(figure, axes)

        summary = (
            f"Win Rate: {result.win_rate:.2f}% | "
            f"Profit Factor: {result.profit_factor:.2f} | "
            f"Max DD: {result.max_drawdown * 100:.2f}%"
        )
        axes.text(0.5, 0.02, summary, transform=axes.transAxes,
                  ha="center", va="bottom",
                  color="w" if self._config.dark_mode else "k")

        path = self._save(figure, strategy_name, "equity")
        logger.info("Generated equity curve image: %s", path)
        return path

    def generate_drawdown_chart(self, strategy_name: str, result: BacktestResult) -> Optional[str]:
        """Plot drawdowns as negative percentages; return the path, or None without data."""
        drawdowns = result.drawdowns
        if not drawdowns:
            logger.warning("Empty drawdown data for strategy: %s", strategy_name)
            return None

        figure, axes = self._new_figure()
        axes.plot(range(len(drawdowns)), [-value * 100.0 for value in drawdowns],
                  linewidth=2, color="red")
        axes.set_title(f"Drawdown Chart: {strategy_name}")
        axes.set_xlabel("Trade Number")
        axes.set_ylabel("Drawdown (%)")
        axes.text(0.5, 0.95, f"Max Drawdown: {result.max_drawdown * 100:.2f}%",
                  transform=axes.transAxes, ha="center", va="top",
                  color="w" if self._config.dark_mode else "k")
        self._apply_style(figure, axes)

        path = self._save(figure, strategy_name, "drawdown")
        logger.info("Generated drawdown chart: %s", path)
        return path

    def generate_monthly_returns_heatmap(
        self, strategy_name: str, result: BacktestResult
    ) -> Optional[str]:
        """Draw a year-by-month heatmap of returns; return the path, or None without data."""
        if not result.monthly_returns:
            logger.warning("No monthly returns data for strategy: %s", strategy_name)
            return None

        years, grid = _monthly_matrix(result.monthly_returns)
        figure, axes = self._new_figure()
        image = axes.imshow(grid, aspect="auto", interpolation="nearest")
        axes.set_yticks(range(len(years)))
        axes.set_yticklabels([str(year) for year in years])
        axes.set_xticks(range(12))
        axes.set_xticklabels(MONTHS, rotation=45)
        axes.set_title(f"Monthly Returns (%): {strategy_name}")
        colorbar = figure.colorbar(image, ax=axes)
        colorbar.set_label("Return (%)")
        self._apply_style(figure, axes)
        axes.grid(False)

        path = self._save(figure, strategy_name, "monthly")
        logger.info("Generated monthly returns heatmap: %s", path)
        return path