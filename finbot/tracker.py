from __future__ import annotations

import logging
import math
from enum import Enum

from .config import TrackerSettings
from .feed import PriceFeed

logger = logging.getLogger(__name__)


class Mode(Enum):
    BUYING = "BUYING"
    SELLING = "SELLING"


class InvariantViolation(RuntimeError):
    """Raised when an action runs against state it cannot apply to."""


class PriceTracker:
    """Single-position buy/sell state machine.

    The tracker alternates between ``Mode.BUYING`` and ``Mode.SELLING``.
    Each cycle ``observe_price`` pulls one reading from the feed and
    recomputes ``price_diff_signal``, the gap between the observed price and
    the last fill price, normalised by the observed price. The eligibility
    check for the current mode compares that signal against a fee-aware
    threshold; ``execute_buy``/``execute_sell`` record the fill and flip mode.
    """

    def __init__(self, settings: TrackerSettings, feed: PriceFeed):
        self.buying_fee = float(settings.buying_fee)
        self.selling_fee = float(settings.selling_fee)
        self.minimum_margin = float(settings.minimum_margin)
        self.minimum_discount = float(settings.minimum_discount)
        self.fill_model = settings.fill_model
        self.buy_fill_offset = float(settings.buy_fill_offset)
        self.sell_fill_offset = float(settings.sell_fill_offset)
        self.feed = feed

        self.mode = Mode.BUYING
        self.current_price: float | None = None
        self.reference_price: float | None = None
        self.price_diff_signal: float | None = None

    @property
    def buy_threshold(self) -> float:
        return self.selling_fee + self.minimum_discount

    @property
    def sell_threshold(self) -> float:
        return self.buying_fee + self.minimum_margin

    def observe_price(self) -> bool:
        price = self.feed.next_price()
        if price is None or not math.isfinite(price) or price <= 0:
            logger.warning(
                "no usable price from feed (got %r), keeping price=%r signal=%r",
                price,
                self.current_price,
                self.price_diff_signal,
            )
            return False

        self.current_price = float(price)
        logger.info("current price %s", self.current_price)
        if self.reference_price is None:
            logger.info("nothing traded yet, price diff signal unset")
            self.price_diff_signal = None
        else:
            self.price_diff_signal = (
                self.current_price - self.reference_price
            ) / self.current_price
        logger.info("current variation is %s", self.price_diff_signal)
        return True

    def eligible_to_buy(self) -> bool:
        if self.mode is not Mode.BUYING:
            logger.error("buy check requested while mode=%s", self.mode.value)
            return False
        logger.info(
            "diff signal %s < buy threshold %s ?", self.price_diff_signal, self.buy_threshold
        )
        if self.price_diff_signal is None:
            return True
        return self.price_diff_signal < self.buy_threshold

    def eligible_to_sell(self) -> bool:
        if self.price_diff_signal is None:
            logger.warning("sell check without a reference price, refusing to sell")
            return False
        if self.mode is not Mode.SELLING:
            logger.error("sell check requested while mode=%s", self.mode.value)
            return False
        logger.info(
            "diff signal %s > sell threshold %s ?", self.price_diff_signal, self.sell_threshold
        )
        return self.price_diff_signal > self.sell_threshold

    def execute_buy(self) -> float:
        price = self._require(Mode.BUYING, "buy")
        if self.fill_model == "fee":
            fill = price * (1.0 + self.buying_fee)
        else:
            fill = price + self.buy_fill_offset
        self._record_fill(fill, Mode.SELLING)
        logger.info("bought at price = %s next action %s", fill, self.mode.value)
        return fill

    def execute_sell(self) -> float:
        price = self._require(Mode.SELLING, "sell")
        if self.fill_model == "fee":
            fill = price * (1.0 - self.selling_fee)
        else:
            fill = price - self.sell_fill_offset
        self._record_fill(fill, Mode.BUYING)
        logger.info("sold at price = %s next action %s", fill, self.mode.value)
        return fill

    def _require(self, mode: Mode, action: str) -> float:
        if self.mode is not mode:
            raise InvariantViolation(f"cannot {action} while mode={self.mode.value}")
        if self.current_price is None:
            raise InvariantViolation(f"cannot {action} before any price was observed")
        return self.current_price

    def _record_fill(self, fill: float, next_mode: Mode) -> None:
        # Fill and quote collapse into one price; the signal restarts from zero.
        self.reference_price = fill
        self.current_price = fill
        self.price_diff_signal = 0.0
        self.mode = next_mode

    def snapshot(self) -> dict[str, object]:
        return {
            "mode": self.mode.value,
            "current_price": self.current_price,
            "reference_price": self.reference_price,
            "price_diff_signal": self.price_diff_signal,
            "buy_threshold": self.buy_threshold,
            "sell_threshold": self.sell_threshold,
            "fill_model": self.fill_model,
        }
