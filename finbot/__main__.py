from __future__ import annotations

import argparse
import json
import signal
import subprocess
import sys
import threading
from pathlib import Path

from .bot import FinBot
from .config import DEFAULT_LOG_FILE, load_config
from .logger import setup_logging
from .simulate import run_scenario_suite


def _default_config_path() -> str | None:
    candidate = Path("finbot.json")
    return str(candidate) if candidate.exists() else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fee-aware single-asset buy/sell decision loop")
    parser.add_argument(
        "log_file",
        nargs="*",
        help=f"Diagnostic log destination (default {DEFAULT_LOG_FILE})",
    )
    parser.add_argument("--config", default=_default_config_path(), help="Path to JSON config")
    parser.add_argument("--max-cycles", type=int, default=None, help="Stop after N cycles")
    parser.add_argument(
        "--scenarios",
        action="store_true",
        help="Run the synthetic scenario suite and print it as JSON",
    )
    parser.add_argument("--gui", action="store_true", help="Launch optional GUI dashboard")
    return parser


def _launch_gui(config_path: str | None) -> None:
    gui_script = Path(__file__).with_name("gui_app.py")
    cmd = [sys.executable, "-m", "streamlit", "run", str(gui_script)]
    if config_path:
        cmd += ["--", "--config", str(config_path)]
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as exc:
        raise RuntimeError(
            "Failed to launch GUI. Install optional dependencies with "
            "'pip install finbot[gui]'"
        ) from exc


def _install_stop_handlers(stop: threading.Event) -> None:
    def _handler(signum: int, _frame: object) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if len(args.log_file) > 1:
        print("Too many arguments")
        return
    try:
        if args.gui:
            _launch_gui(args.config)
            return

        config = load_config(args.config)
        if args.max_cycles is not None and args.max_cycles <= 0:
            raise ValueError("--max-cycles must be > 0")
        if args.scenarios:
            suite = run_scenario_suite(
                settings=config.tracker,
                scenario_length=int(config.feed.scenario_length),
            )
            print(json.dumps(suite, indent=2))
            return

        if args.log_file:
            config.log_file = args.log_file[0]
        else:
            print(f"No path passed, using default {config.log_file}")
        setup_logging(config.log_file, config.console_log_level, config.file_log_level)

        stop = threading.Event()
        _install_stop_handlers(stop)
        FinBot(config).run_loop(stop_event=stop, max_cycles=args.max_cycles)
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
