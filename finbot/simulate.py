from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .config import SCENARIO_NAMES, BotConfig, TrackerSettings
from .feed import ReplayPriceFeed, scenario_prices
from .bot import FinBot
from .tracker import Mode


@dataclass(slots=True)
class _SimStats:
    cycles: int = 0
    buys: int = 0
    sells: int = 0
    holds: int = 0
    skips: int = 0
    realized_pnl: float = 0.0
    wins: int = 0
    losses: int = 0


def simulate(prices: Iterable[float | None], settings: TrackerSettings) -> dict[str, Any]:
    """Run a fresh tracker across ``prices`` and summarise what it did.

    Each entry drives one cycle; ``None`` entries are feed gaps. PnL is per
    unit: each sell realises ``sell_fill - last_buy_fill``.
    """
    readings = list(prices)
    config = BotConfig(tracker=settings)
    bot = FinBot(config, feed=ReplayPriceFeed(readings))
    stats = _SimStats()
    rows: list[dict[str, Any]] = []
    trades: list[dict[str, Any]] = []
    last_buy: float | None = None

    for _ in readings:
        result = bot.run_cycle()
        tracker = bot.tracker
        stats.cycles += 1
        if result.action == "BUY":
            stats.buys += 1
            last_buy = tracker.reference_price
            trades.append({"cycle": result.cycle, "side": "BUY", "price": last_buy, "pnl": 0.0})
        elif result.action == "SELL":
            stats.sells += 1
            fill = tracker.reference_price
            pnl = (fill - last_buy) if (fill is not None and last_buy is not None) else 0.0
            stats.realized_pnl += pnl
            if pnl > 0:
                stats.wins += 1
            elif pnl < 0:
                stats.losses += 1
            trades.append({"cycle": result.cycle, "side": "SELL", "price": fill, "pnl": pnl})
        elif result.action == "SKIP":
            stats.skips += 1
        else:
            stats.holds += 1
        rows.append(
            {
                "cycle": result.cycle,
                "observed_price": readings[result.cycle - 1],
                "reference_price": tracker.reference_price,
                "signal": tracker.price_diff_signal,
                "action": result.action,
                "mode": result.mode,
            }
        )

    closed = stats.wins + stats.losses
    return {
        "summary": {
            "cycles": stats.cycles,
            "buys": stats.buys,
            "sells": stats.sells,
            "holds": stats.holds,
            "skipped": stats.skips,
            "realized_pnl_per_unit": stats.realized_pnl,
            "win_rate_pct": (stats.wins / closed * 100.0) if closed else 0.0,
            "open_position": bot.tracker.mode is Mode.SELLING,
            "final_mode": bot.tracker.mode.value,
        },
        "cycles": rows,
        "trades": trades,
    }


def run_scenario_suite(
    *,
    settings: TrackerSettings,
    scenario_length: int = 500,
    start_price: float = 100.0,
) -> dict[str, Any]:
    per_scenario: list[dict[str, Any]] = []
    for name in SCENARIO_NAMES:
        prices = scenario_prices(name, length=scenario_length, start_price=start_price)
        summary = simulate(prices, settings)["summary"]
        per_scenario.append(
            {
                "scenario": name,
                "buys": int(summary["buys"]),
                "sells": int(summary["sells"]),
                "realized_pnl_per_unit": float(summary["realized_pnl_per_unit"]),
                "final_mode": summary["final_mode"],
            }
        )
    profitable = [row for row in per_scenario if row["realized_pnl_per_unit"] > 0]
    with_trades = [row for row in per_scenario if row["buys"] > 0]
    return {
        "scenario_count": len(per_scenario),
        "with_trades_count": len(with_trades),
        "profitable_count": len(profitable),
        "scenarios": per_scenario,
    }
