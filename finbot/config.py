from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any

DEFAULT_LOG_FILE = "/var/log/finbot.log"

FILL_MODELS = {"fixed", "fee"}
SCENARIO_NAMES = (
    "bull_trend_pullbacks",
    "bear_trend_bounces",
    "sideways_chop",
    "breakout_then_reversal",
    "volatility_spike_regime",
)
FEED_KINDS = {"step", *SCENARIO_NAMES}


@dataclass(slots=True)
class TrackerSettings:
    buying_fee: float = 0.005
    selling_fee: float = 0.005
    # Profit above buying_fee required before selling.
    minimum_margin: float = 0.01
    # Drop below selling_fee required before buying back.
    minimum_discount: float = 0.005
    fill_model: str = "fixed"
    buy_fill_offset: float = 0.1
    sell_fill_offset: float = 0.1


@dataclass(slots=True)
class FeedSettings:
    kind: str = "step"
    base_price: float = 1.0
    step: float = 0.1
    scenario_length: int = 500


@dataclass(slots=True)
class BotConfig:
    log_file: str = DEFAULT_LOG_FILE
    console_log_level: str = "WARNING"
    file_log_level: str = "DEBUG"
    loop_seconds: float = 0.0
    max_cycles: int | None = None
    use_color_output: bool = True
    tracker: TrackerSettings = field(default_factory=TrackerSettings)
    feed: FeedSettings = field(default_factory=FeedSettings)


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return {}
    return json.loads(raw)


def _apply_overrides(default_obj: Any, overrides: dict[str, Any]) -> Any:
    values: dict[str, Any] = {}
    for meta in fields(default_obj):
        name = meta.name
        value = getattr(default_obj, name)
        if name not in overrides:
            values[name] = value
            continue
        override = overrides[name]
        if is_dataclass(value) and isinstance(override, dict):
            values[name] = _apply_overrides(value, override)
        else:
            values[name] = override
    return type(default_obj)(**values)


def load_config(path: str | Path | None = None) -> BotConfig:
    cfg = BotConfig()
    if path is None:
        return _normalize_config(cfg)
    path_obj = Path(path)
    overrides = _read_json(path_obj)
    if not overrides:
        return _normalize_config(cfg)
    merged = _apply_overrides(cfg, overrides)
    return _normalize_config(merged)


def _check_fraction(name: str, value: float) -> None:
    if not 0.0 <= float(value) < 1.0:
        raise ValueError(f"tracker.{name} must be in [0, 1)")


def _normalize_level(name: str, value: str) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"config.{name} must be a logging level name")
    return level


def _normalize_config(config: BotConfig) -> BotConfig:
    if not str(config.log_file).strip():
        raise ValueError("config.log_file must be non-empty")
    config.console_log_level = _normalize_level("console_log_level", config.console_log_level)
    config.file_log_level = _normalize_level("file_log_level", config.file_log_level)
    if float(config.loop_seconds) < 0:
        raise ValueError("config.loop_seconds must be >= 0")
    if config.max_cycles is not None and int(config.max_cycles) <= 0:
        raise ValueError("config.max_cycles must be > 0 when set")

    tracker = config.tracker
    _check_fraction("buying_fee", tracker.buying_fee)
    _check_fraction("selling_fee", tracker.selling_fee)
    _check_fraction("minimum_margin", tracker.minimum_margin)
    _check_fraction("minimum_discount", tracker.minimum_discount)
    fill_model = str(tracker.fill_model).strip().lower()
    if fill_model not in FILL_MODELS:
        raise ValueError("tracker.fill_model must be one of: fixed, fee")
    tracker.fill_model = fill_model
    if float(tracker.buy_fill_offset) < 0:
        raise ValueError("tracker.buy_fill_offset must be >= 0")
    if float(tracker.sell_fill_offset) < 0:
        raise ValueError("tracker.sell_fill_offset must be >= 0")

    feed = config.feed
    kind = str(feed.kind).strip().lower()
    if kind not in FEED_KINDS:
        raise ValueError(f"feed.kind must be one of: {', '.join(sorted(FEED_KINDS))}")
    feed.kind = kind
    if float(feed.base_price) <= 0:
        raise ValueError("feed.base_price must be > 0")
    if int(feed.scenario_length) < 50:
        raise ValueError("feed.scenario_length must be >= 50")
    return config
