from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "finbot"
_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def setup_logging(
    log_file: str | Path,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
) -> bool:
    """Attach a console sink and a file sink to the ``finbot`` logger.

    Returns ``True`` when the file sink is active. If the file cannot be
    opened the logger falls back to console only and reports the failure.
    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    path = Path(log_file)
    try:
        file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    except OSError as exc:
        logger.error("cannot open log file %s (%s), logging to console only", path, exc)
        return False
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.warning("log file %s", path)
    return True
