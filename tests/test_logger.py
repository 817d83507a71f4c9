import logging
import tempfile
import unittest
from pathlib import Path

from finbot.logger import ROOT_LOGGER, setup_logging


class LoggerTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.addHandler(logging.NullHandler())
        logger.propagate = True

    def test_file_sink_captures_info_console_filters_to_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "finbot.log"
            self.assertTrue(setup_logging(path))
            logger = logging.getLogger(ROOT_LOGGER)
            levels = sorted(type(h).__name__ + ":" + logging.getLevelName(h.level) for h in logger.handlers)
            self.assertEqual(levels, ["FileHandler:DEBUG", "StreamHandler:WARNING"])

            logging.getLogger("finbot.tracker").info("current price 1.0")
            for handler in logger.handlers:
                handler.flush()
            content = path.read_text(encoding="utf-8")
            self.tearDown()
        self.assertIn("log file", content)
        self.assertIn("current price 1.0", content)

    def test_unwritable_path_degrades_to_console(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing-dir" / "finbot.log"
            self.assertFalse(setup_logging(path))
        logger = logging.getLogger(ROOT_LOGGER)
        self.assertEqual([type(h) for h in logger.handlers], [logging.StreamHandler])

    def test_repeat_setup_replaces_handlers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            setup_logging(Path(tmp) / "a.log")
            setup_logging(Path(tmp) / "b.log")
            self.assertEqual(len(logging.getLogger(ROOT_LOGGER).handlers), 2)
            self.tearDown()


if __name__ == "__main__":
    unittest.main()
