import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from finbot.__main__ import main
from finbot.config import DEFAULT_LOG_FILE
from finbot.logger import ROOT_LOGGER


def _run(argv: list[str]) -> str:
    out = io.StringIO()
    with redirect_stdout(out), mock.patch("finbot.__main__._install_stop_handlers"):
        main(argv)
    return out.getvalue()


class MainTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.addHandler(logging.NullHandler())
        logger.propagate = True

    def test_too_many_arguments_returns_early(self) -> None:
        with mock.patch("finbot.__main__.FinBot") as bot_cls, mock.patch(
            "finbot.__main__.setup_logging"
        ) as setup:
            output = _run(["one.log", "two.log"])
        self.assertIn("Too many arguments", output)
        bot_cls.assert_not_called()
        setup.assert_not_called()

    def test_no_path_uses_default_log_file(self) -> None:
        with mock.patch("finbot.__main__.setup_logging") as setup:
            output = _run(["--max-cycles", "2"])
        self.assertIn(f"No path passed, using default {DEFAULT_LOG_FILE}", output)
        self.assertEqual(setup.call_args.args[0], DEFAULT_LOG_FILE)

    def test_runs_loop_and_writes_log_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "finbot.log"
            with redirect_stderr(io.StringIO()):
                _run([str(log_path), "--max-cycles", "3"])
            self.tearDown()
            content = log_path.read_text(encoding="utf-8")
        self.assertEqual(content.count("STARTING NEW CYCLE"), 3)
        self.assertIn("bought at price", content)

    def test_scenarios_prints_suite_json(self) -> None:
        output = _run(["--scenarios"])
        suite = json.loads(output)
        self.assertEqual(suite["scenario_count"], 5)

    def test_bad_config_exits_with_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "finbot.json"
            path.write_text(json.dumps({"tracker": {"fill_model": "market"}}), encoding="utf-8")
            err = io.StringIO()
            with redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
                _run(["--config", str(path), "--scenarios"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("ERROR:", err.getvalue())

    def test_non_positive_max_cycles_is_rejected(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            _run(["--max-cycles", "0"])


if __name__ == "__main__":
    unittest.main()
