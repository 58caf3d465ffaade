"""Tests for the statistics engine and result browsing"""

import unittest
import os
import sys
from datetime import date

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analytics import (LotteryAnalytics, calculate_game_statistics, calculate_high_low_ratio,
                       find_consecutive_patterns)
from config import AppConfig
from core.data_manager import InMemoryResultStore
from schema import CleanRecord

GAME_642 = AppConfig.GAMES['6/42']


def draw(day, numbers, jackpot=None):
    return CleanRecord('6/42', date(2025, 9, day), tuple(numbers), jackpot)


class TestGameStatistics(unittest.TestCase):
    """Test the pure statistics calculation"""

    def setUp(self):
        self.results = [
            draw(2, [1, 2, 3, 4, 5, 6], 5000000.0),
            draw(4, [2, 4, 6, 8, 10, 12], 7000000.0),
        ]
        self.stats = calculate_game_statistics(GAME_642, self.results)

    def test_frequency(self):
        frequency = self.stats.number_frequency
        self.assertEqual(frequency[2], 2)
        self.assertEqual(frequency[4], 2)
        self.assertEqual(frequency[6], 2)
        self.assertTrue(all(frequency[n] == 1 for n in (1, 3, 5, 8, 10, 12)))
        self.assertEqual(sum(frequency.values()), 12)

    def test_even_odd(self):
        # 9 even and 3 odd numbers across both draws
        self.assertEqual(self.stats.patterns.even_pct, 75.0)
        self.assertEqual(self.stats.patterns.odd_pct, 25.0)

    def test_high_low(self):
        self.assertEqual(self.stats.patterns.high_pct, 0.0)
        self.assertEqual(self.stats.patterns.low_pct, 100.0)

    def test_consecutive(self):
        self.assertEqual(self.stats.patterns.consecutive_count, 5)
        self.assertEqual(self.stats.patterns.consecutive_pct, 41.7)

    def test_gaps(self):
        patterns = self.stats.patterns
        self.assertEqual(len(patterns.missing_numbers), 33)
        self.assertNotIn(2, patterns.missing_numbers)
        self.assertIn(42, patterns.missing_numbers)
        self.assertEqual(patterns.coverage_pct, 21.4)

    def test_hot_and_cold(self):
        self.assertEqual(self.stats.hot_numbers, [2, 4, 6, 1, 3, 5, 8, 10, 12])
        self.assertEqual(self.stats.cold_numbers, [12, 10, 8, 5, 3, 1, 6, 4, 2])

    def test_hot_limited_to_ten(self):
        results = [draw(day, [day, day + 10, day + 20, day + 21, day + 30, day + 31]) for day in range(1, 6)]
        stats = calculate_game_statistics(GAME_642, results)
        self.assertEqual(len(stats.hot_numbers), AppConfig.HOT_COLD_COUNT)
        self.assertEqual(len(stats.cold_numbers), AppConfig.HOT_COLD_COUNT)

    def test_jackpots_ignore_missing_and_zero(self):
        results = self.results + [draw(6, [7, 9, 11, 13, 15, 17], 0.0), draw(9, [7, 9, 11, 13, 15, 19])]
        stats = calculate_game_statistics(GAME_642, results)
        self.assertEqual(stats.average_jackpot, 6000000.0)
        self.assertEqual(stats.largest_jackpot, 7000000.0)

    def test_date_range(self):
        self.assertEqual(self.stats.date_range.earliest, date(2025, 9, 2))
        self.assertEqual(self.stats.date_range.latest, date(2025, 9, 4))
        self.assertEqual(self.stats.date_range.days_covered, 2)
        self.assertEqual(self.stats.total_draws, 2)

    def test_pattern_window_uses_most_recent(self):
        stats = calculate_game_statistics(GAME_642, self.results, pattern_window=1)
        self.assertEqual(stats.patterns.window_size, 1)
        self.assertEqual(stats.patterns.even_pct, 100.0)
        # frequency still covers all draws
        self.assertEqual(sum(stats.number_frequency.values()), 12)

    def test_empty_results(self):
        stats = calculate_game_statistics(GAME_642, [])
        self.assertEqual(stats.total_draws, 0)
        self.assertEqual(stats.number_frequency, {})
        self.assertEqual(stats.hot_numbers, [])
        self.assertEqual(stats.average_jackpot, 0.0)
        self.assertEqual(stats.patterns.missing_numbers, [])
        self.assertEqual(stats.patterns.even_pct, 0.0)

    def test_high_low_midpoint(self):
        # midpoint of 45 is 23: 23 is low, 24 is high
        high, low = calculate_high_low_ratio([draw(2, [23, 24])], 45)
        self.assertEqual((high, low), (50.0, 50.0))

    def test_consecutive_counts_unsorted_draws(self):
        count, _ = find_consecutive_patterns([draw(2, [9, 3, 8, 2, 20, 30])], 6)
        self.assertEqual(count, 2)

    def test_to_dict(self):
        payload = self.stats.to_dict()
        self.assertEqual(payload['numberFrequency']['2'], 2)
        self.assertEqual(payload['patterns']['evenOddRatio'], {'even': 75.0, 'odd': 25.0})
        self.assertEqual(payload['patterns']['numberGaps']['missingCount'], 33)


class TestLotteryAnalytics(unittest.TestCase):
    """Test store-backed analysis and browsing"""

    def setUp(self):
        self.store = InMemoryResultStore(AppConfig.GAMES.values())
        self.analytics = LotteryAnalytics(self.store)
        game_642 = self.store.find_game('6/42').id
        game_645 = self.store.find_game('6/45').id
        self.store.create_result(game_642, date(2025, 9, 2), [1, 2, 3, 4, 5, 6], 5000000)
        self.store.create_result(game_642, date(2025, 9, 4), [2, 4, 6, 8, 10, 12], 7000000)
        self.store.create_result(game_645, date(2025, 9, 3), [3, 11, 19, 27, 36, 45], 9000000)

    def test_number_analysis(self):
        analysis = self.analytics.get_number_analysis('6/42')
        self.assertEqual(analysis['totalDraws'], 2)
        self.assertEqual(analysis['gameConfig'], {'maxNumber': 42, 'numberCount': 6})

    def test_number_analysis_limit(self):
        analysis = self.analytics.get_number_analysis('6/42', limit=1)
        self.assertEqual(analysis['totalDraws'], 1)
        self.assertEqual(analysis['dateRange']['latest'], '2025-09-04')

    def test_number_analysis_unknown_game(self):
        with self.assertRaises(KeyError):
            self.analytics.get_number_analysis('6/99')

    def test_game_summary(self):
        summary = {entry['gameName']: entry for entry in self.analytics.get_game_summary()}
        self.assertEqual(len(summary), 5)
        self.assertEqual(summary['6/42']['totalResults'], 2)
        self.assertEqual(summary['6/42']['oldestResult'], '2025-09-02')
        self.assertEqual(summary['6/42']['latestResult'], '2025-09-04')
        self.assertEqual(summary['6/42']['dateRange'], 2)
        self.assertEqual(summary['6/58']['totalResults'], 0)
        self.assertIsNone(summary['6/58']['latestResult'])

    def test_single_game_summary(self):
        summary = self.analytics.get_game_summary('6/45')
        self.assertEqual([entry['gameName'] for entry in summary], ['6/45'])

    def test_system_statistics(self):
        stats = self.analytics.get_system_statistics()
        self.assertEqual(stats['totalGames'], 5)
        self.assertEqual(stats['totalResults'], 3)
        self.assertEqual(stats['totalJackpotValue'], 21000000.0)
        self.assertIsNotNone(stats['lastUpdated'])
        self.assertEqual(len(stats['gameStatistics']), 5)

    def test_recent_results(self):
        recent = self.analytics.get_recent_results(limit=2)
        self.assertEqual([result['drawDate'] for result in recent], ['2025-09-04', '2025-09-03'])
        self.assertEqual(recent[1]['gameDescription'], 'Mega Lotto 6/45')

    def test_search_by_game(self):
        page = self.analytics.search_results(game_name='6/42')
        self.assertEqual(page['pagination']['total'], 2)
        self.assertFalse(page['pagination']['hasMore'])

    def test_search_by_numbers(self):
        page = self.analytics.search_results(numbers=[2, 4, 12])
        self.assertEqual(len(page['results']), 1)
        self.assertEqual(page['results'][0]['drawDate'], '2025-09-04')

    def test_search_pagination(self):
        page = self.analytics.search_results(limit=2, offset=0)
        self.assertEqual(len(page['results']), 2)
        self.assertEqual(page['pagination'], {'total': 3, 'limit': 2, 'offset': 0, 'hasMore': True})

    def test_search_jackpot_range(self):
        page = self.analytics.search_results(min_jackpot=6000000, max_jackpot=8000000)
        self.assertEqual([result['jackpot'] for result in page['results']], [7000000.0])

    def test_search_non_positive_limit_uses_default(self):
        for limit in (0, -5, None):
            page = self.analytics.search_results(limit=limit)
            self.assertEqual(page['pagination']['limit'], AppConfig.DEFAULT_PAGE_SIZE)
            self.assertEqual(len(page['results']), 3)
            self.assertFalse(page['pagination']['hasMore'])

    def test_search_negative_offset_clamped(self):
        page = self.analytics.search_results(limit=2, offset=-3)
        self.assertEqual(page['pagination']['offset'], 0)
        self.assertEqual([result['drawDate'] for result in page['results']], ['2025-09-04', '2025-09-03'])

        page = self.analytics.search_results(numbers=[2], offset=-1)
        self.assertEqual(len(page['results']), 2)

    def test_search_limit_capped(self):
        page = self.analytics.search_results(limit=10000)
        self.assertEqual(page['pagination']['limit'], AppConfig.MAX_PAGE_SIZE)


if __name__ == '__main__':
    unittest.main()
