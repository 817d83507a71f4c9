import logging

from .bot import CycleResult, FinBot
from .config import BotConfig, FeedSettings, TrackerSettings, load_config
from .feed import PriceFeed, ReplayPriceFeed, StepPriceFeed
from .tracker import InvariantViolation, Mode, PriceTracker

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BotConfig",
    "CycleResult",
    "FeedSettings",
    "FinBot",
    "InvariantViolation",
    "Mode",
    "PriceFeed",
    "PriceTracker",
    "ReplayPriceFeed",
    "StepPriceFeed",
    "TrackerSettings",
    "load_config",
]
