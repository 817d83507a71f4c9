from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import pandas as pd
import streamlit as st

try:
    from finbot.config import SCENARIO_NAMES, BotConfig, TrackerSettings, load_config
    from finbot.feed import StepPriceFeed, scenario_prices
    from finbot.simulate import simulate
except ModuleNotFoundError:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
    from finbot.config import SCENARIO_NAMES, BotConfig, TrackerSettings, load_config
    from finbot.feed import StepPriceFeed, scenario_prices
    from finbot.simulate import simulate


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", default=None)
    args, _ = parser.parse_known_args()
    return args


def _step_prices(base_price: float, step: float, length: int) -> list[float]:
    feed = StepPriceFeed(base_price=base_price, step=step)
    return [float(feed.next_price()) for _ in range(length)]


def _build_cycles_df(result: dict[str, Any]) -> pd.DataFrame:
    rows = result.get("cycles", [])
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    for col in ["observed_price", "reference_price", "signal"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.set_index("cycle")


def _build_trades_df(result: dict[str, Any]) -> pd.DataFrame:
    trades = result.get("trades", [])
    if not trades:
        return pd.DataFrame()
    df = pd.DataFrame(trades)
    df["cumulative_pnl"] = df["pnl"].fillna(0).cumsum()
    return df


def _tracker_controls(defaults: TrackerSettings) -> TrackerSettings:
    st.subheader("Thresholds")
    buying_fee = st.number_input("Buying fee", min_value=0.0, max_value=0.99, value=defaults.buying_fee, format="%.4f")
    selling_fee = st.number_input("Selling fee", min_value=0.0, max_value=0.99, value=defaults.selling_fee, format="%.4f")
    minimum_margin = st.number_input(
        "Minimum margin", min_value=0.0, max_value=0.99, value=defaults.minimum_margin, format="%.4f"
    )
    minimum_discount = st.number_input(
        "Minimum discount", min_value=0.0, max_value=0.99, value=defaults.minimum_discount, format="%.4f"
    )
    fill_model = st.selectbox("Fill model", ["fixed", "fee"], index=0 if defaults.fill_model == "fixed" else 1)
    buy_offset = st.number_input("Buy fill offset", min_value=0.0, value=defaults.buy_fill_offset)
    sell_offset = st.number_input("Sell fill offset", min_value=0.0, value=defaults.sell_fill_offset)
    return TrackerSettings(
        buying_fee=float(buying_fee),
        selling_fee=float(selling_fee),
        minimum_margin=float(minimum_margin),
        minimum_discount=float(minimum_discount),
        fill_model=str(fill_model),
        buy_fill_offset=float(buy_offset),
        sell_fill_offset=float(sell_offset),
    )


def _render_summary(summary: dict[str, Any]) -> None:
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Cycles", summary["cycles"])
    c2.metric("Buys / Sells", f"{summary['buys']} / {summary['sells']}")
    c3.metric("Realized PnL per unit", f"{summary['realized_pnl_per_unit']:.4f}")
    c4.metric("Final mode", summary["final_mode"])


def _render_charts(result: dict[str, Any]) -> None:
    cycles_df = _build_cycles_df(result)
    if cycles_df.empty:
        st.info("No cycles ran.")
        return
    st.subheader("Observed vs reference price")
    st.line_chart(cycles_df[["observed_price", "reference_price"]], height=280)
    st.subheader("Price diff signal")
    st.line_chart(cycles_df[["signal"]], height=180)

    trades_df = _build_trades_df(result)
    st.subheader("Trades")
    if trades_df.empty:
        st.info("No trades executed.")
        return
    st.line_chart(trades_df.set_index("cycle")[["cumulative_pnl"]], height=180)
    st.dataframe(trades_df, width="stretch", height=300)


def main() -> None:
    args = _parse_args()
    st.set_page_config(page_title="finbot simulator", layout="wide")
    st.title("finbot simulator")
    st.caption("Runs the buy/sell tracker over a synthetic price feed in memory.")

    try:
        config = load_config(args.config)
    except Exception as exc:
        st.error(f"Failed to load config: {exc}")
        config = BotConfig()

    with st.sidebar:
        settings = _tracker_controls(config.tracker)
        st.subheader("Feed")
        feed_options = ["step", *SCENARIO_NAMES]
        kind = st.selectbox(
            "Feed",
            feed_options,
            index=feed_options.index(config.feed.kind) if config.feed.kind in feed_options else 0,
        )
        base_price = st.number_input("Base price", min_value=0.0001, value=config.feed.base_price)
        step = st.number_input("Step (step feed only)", value=config.feed.step)
        length = int(st.number_input("Cycles", min_value=50, value=config.feed.scenario_length, step=50))

    if kind == "step":
        prices = _step_prices(float(base_price), float(step), length)
    else:
        prices = scenario_prices(kind, length=length, start_price=float(base_price))

    result = simulate(prices, settings)
    _render_summary(result["summary"])
    _render_charts(result)


if __name__ == "__main__":
    main()
