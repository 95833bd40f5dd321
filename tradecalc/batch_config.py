"""Settings of a batch backtest and their JSON representation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Union

from tradecalc.backtester import BacktestConfig


@dataclass
class BatchConfig:
    """Performance, output, path and logging settings of a batch run."""

    thread_count: int = 0  # 0 means one thread per available CPU
    batch_size: int = 10
    memory_limit_mb: int = 2048

    output_formats: list[str] = field(default_factory=lambda: ["markdown"])
    chart_format: str = "png"
    chart_width: int = 1200
    chart_height: int = 800
    chart_dpi: int = 100
    include_charts_in_report: bool = True

    strategy_dir: str = "data/strategies"
    output_dir: str = "exports"
    chart_dir: str = "exports/charts"

    log_level: str = "info"
    log_file: str = "logs/batch_backtest.log"
    console_output: bool = True
    track_performance: bool = True

    backtest_config: BacktestConfig = field(default_factory=BacktestConfig)


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer, got {value!r}")
    return value


def _as_unsigned(value: Any, key: str) -> int:
    number = _as_int(value, key)
    if number < 0:
        raise ValueError(f"{key} must not be negative, got {number}")
    return number


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {value!r}")
    return float(value)


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {value!r}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be a boolean, got {value!r}")
    return value


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise TypeError(f"{key} must be an array of strings, got {value!r}")
    return [_as_str(item, key) for item in value]


_Converter = Callable[[Any, str], Any]

_SECTIONS: dict[str, tuple[tuple[str, str, _Converter], ...]] = {
    "performance": (
        ("thread_count", "thread_count", _as_unsigned),
        ("batch_size", "batch_size", _as_unsigned),
        ("memory_limit_mb", "memory_limit_mb", _as_unsigned),
    ),
    "output": (
        ("formats", "output_formats", _as_str_list),
        ("chart_format", "chart_format", _as_str),
        ("chart_width", "chart_width", _as_int),
        ("chart_height", "chart_height", _as_int),
        ("chart_dpi", "chart_dpi", _as_int),
        ("include_charts_in_report", "include_charts_in_report", _as_bool),
    ),
    "paths": (
        ("strategy_dir", "strategy_dir", _as_str),
        ("output_dir", "output_dir", _as_str),
        ("chart_dir", "chart_dir", _as_str),
    ),
    "logging": (
        ("level", "log_level", _as_str),
        ("file", "log_file", _as_str),
        ("console", "console_output", _as_bool),
        ("performance_metrics", "track_performance", _as_bool),
    ),
}

_BACKTEST_KEYS: tuple[tuple[str, str], ...] = (
    ("initial_capital", "initial_balance"),
    ("risk_per_trade", "risk_per_trade"),
    ("commission", "commission"),
    ("slippage", "slippage"),
)


def batch_config_to_dict(config: BatchConfig) -> dict[str, dict[str, Any]]:
    """Nested JSON-ready mapping of the batch settings (backtest settings excluded)."""
    return {
        section: {key: _copy(getattr(config, attr)) for key, attr, _ in keys}
        for section, keys in _SECTIONS.items()
    }


def _copy(value: Any) -> Any:
    return list(value) if isinstance(value, list) else value


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data[name]
    if not isinstance(section, Mapping):
        raise TypeError(f"section {name!r} must be an object, got {section!r}")
    return section


def batch_config_from_dict(data: Mapping[str, Any]) -> BatchConfig:
    """Build a config from a nested mapping; missing keys keep their defaults.

    Raises ``TypeError`` for values of the wrong kind and ``ValueError`` for
    negative counts.
    """
    if not isinstance(data, Mapping):
        raise TypeError(f"batch configuration must be an object, got {data!r}")
    config = BatchConfig()

    for name, keys in _SECTIONS.items():
        if name not in data:
            continue
        section = _section(data, name)
        for key, attr, convert in keys:
            if key in section:
                setattr(config, attr, convert(section[key], f"{name}.{key}"))

    if "backtest" in data:
        section = _section(data, "backtest")
        for key, attr in _BACKTEST_KEYS:
            if key in section:
                setattr(config.backtest_config, attr, _as_float(section[key], f"backtest.{key}"))

    return config


def load_batch_config(filename: Union[str, Path]) -> BatchConfig:
    """Read a batch configuration from a JSON file.

    Raises ``FileNotFoundError`` when the file is missing and
    ``json.JSONDecodeError`` when it is not valid JSON.
    """
    path = Path(filename)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open(encoding="utf-8") as handle:
        data = json.load(handle)
    return batch_config_from_dict(data)