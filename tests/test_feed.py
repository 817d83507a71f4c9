import unittest

from finbot.config import SCENARIO_NAMES, FeedSettings
from finbot.feed import ReplayPriceFeed, StepPriceFeed, build_feed, scenario_prices


class FeedTests(unittest.TestCase):
    def test_step_feed_starts_at_base_and_increments(self) -> None:
        feed = StepPriceFeed(base_price=1.0, step=0.1)
        readings = [feed.next_price() for _ in range(4)]
        for got, want in zip(readings, [1.0, 1.1, 1.2, 1.3]):
            self.assertAlmostEqual(got, want)

    def test_replay_feed_returns_gaps_and_then_none(self) -> None:
        feed = ReplayPriceFeed([10, None, 12.5])
        self.assertEqual(feed.next_price(), 10.0)
        self.assertIsNone(feed.next_price())
        self.assertEqual(feed.next_price(), 12.5)
        self.assertTrue(feed.exhausted)
        self.assertIsNone(feed.next_price())

    def test_scenario_prices_shape(self) -> None:
        prices = scenario_prices("bull_trend_pullbacks", length=120, start_price=50.0)
        self.assertEqual(len(prices), 120)
        self.assertEqual(prices[0], 50.0)
        self.assertGreater(prices[-1], prices[0])

    def test_every_configured_scenario_builds(self) -> None:
        for name in SCENARIO_NAMES:
            with self.subTest(name=name):
                self.assertEqual(len(scenario_prices(name, length=80)), 80)
        self.assertLess(
            scenario_prices("bear_trend_bounces", length=80)[-1],
            scenario_prices("bear_trend_bounces", length=80)[0],
        )

    def test_breakout_then_reversal_peaks_mid_path(self) -> None:
        prices = scenario_prices("breakout_then_reversal", length=200)
        peak = prices.index(max(prices))
        self.assertGreater(peak, 80)
        self.assertLessEqual(peak, 101)
        self.assertLess(prices[-1], max(prices))

    def test_scenario_prices_rejects_unknown_and_short(self) -> None:
        with self.assertRaises(ValueError):
            scenario_prices("moonshot", length=100)
        with self.assertRaises(ValueError):
            scenario_prices("sideways_chop", length=10)

    def test_build_feed_by_kind(self) -> None:
        self.assertIsInstance(build_feed(FeedSettings(kind="step")), StepPriceFeed)
        feed = build_feed(FeedSettings(kind="bear_trend_bounces", base_price=20.0, scenario_length=60))
        self.assertIsInstance(feed, ReplayPriceFeed)
        self.assertEqual(feed.next_price(), 20.0)


if __name__ == "__main__":
    unittest.main()
