from __future__ import annotations

import logging
import os
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable

from .config import BotConfig
from .feed import PriceFeed, build_feed
from .tracker import Mode, PriceTracker

logger = logging.getLogger(__name__)


class _Ansi:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"


@dataclass(slots=True)
class CycleResult:
    cycle: int
    action: str
    reason: str
    mode: str
    price: float | None
    details: dict[str, Any]


class FinBot:
    def __init__(self, config: BotConfig, feed: PriceFeed | None = None):
        self.config = config
        self.feed = feed if feed is not None else build_feed(config.feed)
        self.tracker = PriceTracker(config.tracker, self.feed)
        self.cycles = 0
        self._handlers: dict[Mode, Callable[[], tuple[str, str]]] = {
            Mode.BUYING: self._buying_cycle,
            Mode.SELLING: self._selling_cycle,
        }

    def run_loop(
        self,
        stop_event: threading.Event | None = None,
        max_cycles: int | None = None,
    ) -> int:
        stop = stop_event or threading.Event()
        limit = max_cycles if max_cycles is not None else self.config.max_cycles
        ran = 0
        while not stop.is_set():
            if limit is not None and ran >= limit:
                break
            result = self.run_cycle()
            ran += 1
            logger.debug(self.format_cycle_result(result, use_color=False))
            if self.config.loop_seconds > 0:
                stop.wait(float(self.config.loop_seconds))
        logger.warning("loop stopped after %s cycles", ran)
        return ran

    def run_cycle(self) -> CycleResult:
        self.cycles += 1
        logger.warning("STARTING NEW CYCLE")
        tracker = self.tracker
        if not tracker.observe_price():
            action, reason = "SKIP", "no price from feed"
        else:
            action, reason = self._handlers[tracker.mode]()
        return CycleResult(
            cycle=self.cycles,
            action=action,
            reason=reason,
            mode=tracker.mode.value,
            price=tracker.current_price,
            details={
                "signal": _fmt(tracker.price_diff_signal),
                "reference": _fmt(tracker.reference_price),
                "buy_threshold": _fmt(tracker.buy_threshold),
                "sell_threshold": _fmt(tracker.sell_threshold),
            },
        )

    def _buying_cycle(self) -> tuple[str, str]:
        if not self.tracker.eligible_to_buy():
            return "HOLD", "price has not dropped enough to buy"
        cold = self.tracker.reference_price is None
        self.tracker.execute_buy()
        if cold:
            return "BUY", "first purchase"
        return "BUY", "price dropped below buy threshold"

    def _selling_cycle(self) -> tuple[str, str]:
        if not self.tracker.eligible_to_sell():
            return "HOLD", "price has not risen enough to sell"
        self.tracker.execute_sell()
        return "SELL", "price rose above sell threshold"

    def status(self) -> dict[str, Any]:
        return {
            "cycles": self.cycles,
            "feed": type(self.feed).__name__,
            **self.tracker.snapshot(),
        }

    def format_cycle_result(self, result: CycleResult, use_color: bool | None = None) -> str:
        if use_color is None:
            use_color = self._supports_color()
        action_text = self._paint(result.action, self._action_color(result.action), use_color)
        mode_text = self._paint(f"[{result.mode}]", _Ansi.MAGENTA, use_color)
        price_text = self._paint(_fmt(result.price), _Ansi.CYAN, use_color)
        details = ", ".join(f"{key}={value}" for key, value in result.details.items())
        return (
            f"#{result.cycle} {mode_text} price={price_text} "
            f"action={action_text} reason=\"{result.reason}\" {details}"
        )

    def _supports_color(self) -> bool:
        if not bool(self.config.use_color_output):
            return False
        if os.getenv("NO_COLOR"):
            return False
        if not sys.stdout.isatty():
            return False
        return True

    def _paint(self, value: object, color: str, enabled: bool) -> str:
        text = str(value)
        if not enabled:
            return text
        return f"{color}{text}{_Ansi.RESET}"

    def _action_color(self, action: str) -> str:
        upper = action.upper()
        if upper == "BUY":
            return _Ansi.GREEN
        if upper == "SELL":
            return _Ansi.RED
        if upper == "SKIP":
            return _Ansi.BLUE
        return _Ansi.YELLOW


def _fmt(value: float | None) -> str:
    if value is None:
        return "None"
    return f"{value:.6f}"
