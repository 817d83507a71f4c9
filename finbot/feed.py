from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from .config import FeedSettings, SCENARIO_NAMES


class PriceFeed(ABC):
    """Source of one price reading per cycle.

    ``next_price`` returns ``None`` when no data is available; callers keep
    their previous state for that cycle.
    """

    @abstractmethod
    def next_price(self) -> float | None:
        pass


class StepPriceFeed(PriceFeed):
    def __init__(self, base_price: float = 1.0, step: float = 0.1):
        self.base_price = float(base_price)
        self.step = float(step)
        self._last: float | None = None

    def next_price(self) -> float | None:
        if self._last is None:
            self._last = self.base_price
        else:
            self._last = self._last + self.step
        return self._last


class ReplayPriceFeed(PriceFeed):
    def __init__(self, prices: Iterable[float | None]):
        self._prices = list(prices)
        self._idx = 0

    @property
    def exhausted(self) -> bool:
        return self._idx >= len(self._prices)

    def next_price(self) -> float | None:
        if self.exhausted:
            return None
        price = self._prices[self._idx]
        self._idx += 1
        return None if price is None else float(price)


_RALLY = (0.012, 0.012, -0.008, 0.012, -0.008, 0.012, -0.008, 0.012)
_SLIDE = tuple(-step for step in _RALLY)

# Per-step returns cycled through each half of the path.
_SCENARIO_PATTERNS: dict[str, tuple[tuple[float, ...], tuple[float, ...]]] = {
    "bull_trend_pullbacks": (_RALLY, _RALLY),
    "bear_trend_bounces": (_SLIDE, _SLIDE),
    "sideways_chop": ((0.006, -0.005, 0.004, -0.004, 0.005, -0.006),) * 2,
    "breakout_then_reversal": (_RALLY, _SLIDE),
    "volatility_spike_regime": ((0.020, -0.010, 0.018, -0.009, 0.016, -0.008),) * 2,
}


def scenario_prices(name: str, length: int, start_price: float = 100.0) -> list[float]:
    if length < 50:
        raise ValueError("scenario length must be >= 50")
    if name not in _SCENARIO_PATTERNS:
        raise ValueError(f"unknown scenario: {name}")
    first_half, second_half = _SCENARIO_PATTERNS[name]
    price = max(1e-6, float(start_price))
    prices: list[float] = []
    for idx in range(length):
        pattern = first_half if idx < length // 2 else second_half
        prices.append(price)
        price = max(1e-6, price * (1.0 + pattern[idx % len(pattern)]))
    return prices


def build_feed(settings: FeedSettings) -> PriceFeed:
    if settings.kind == "step":
        return StepPriceFeed(base_price=settings.base_price, step=settings.step)
    if settings.kind in SCENARIO_NAMES:
        return ReplayPriceFeed(
            scenario_prices(
                settings.kind,
                length=int(settings.scenario_length),
                start_price=settings.base_price,
            )
        )
    raise ValueError(f"unknown feed kind: {settings.kind}")
