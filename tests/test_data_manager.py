"""Tests for the SQLite and in-memory result stores"""

import unittest
import os
import sys
import shutil
import tempfile
from datetime import date

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import AppConfig
from core.data_manager import (DuplicateResultError, InMemoryResultStore, LotteryDataManager,
                               StoreError, StoreUnavailableError, get_data_manager)


class StoreContractMixin:
    """Checks every ResultStore implementation must pass"""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()
        self.store.seed_games(AppConfig.GAMES.values())
        self.game = self.store.find_game('6/42')

    def test_seed_is_idempotent(self):
        self.store.seed_games(AppConfig.GAMES.values())
        self.assertEqual(self.store.count_games(), 5)
        self.assertEqual(self.store.find_game('6/42').id, self.game.id)

    def test_game_fields(self):
        self.assertEqual(self.game.description, 'Lotto 6/42')
        self.assertEqual(self.game.max_number, 42)
        self.assertEqual(self.game.number_count, 6)
        self.assertIsNone(self.store.find_game('6/99'))

    def test_create_and_find(self):
        created = self.store.create_result(self.game.id, date(2025, 9, 2), [1, 15, 22, 28, 35, 42], 6000000.456)
        found = self.store.find_result(self.game.id, date(2025, 9, 2))

        self.assertEqual(found, created)
        self.assertEqual(found.numbers, (1, 15, 22, 28, 35, 42))
        self.assertEqual(found.game_name, '6/42')
        self.assertEqual(found.jackpot, 6000000.46)
        self.assertIsNone(self.store.find_result(self.game.id, date(2025, 9, 4)))

    def test_unique_per_game_and_date(self):
        self.store.create_result(self.game.id, date(2025, 9, 2), [1, 2, 3, 4, 5, 6])
        with self.assertRaises(DuplicateResultError):
            self.store.create_result(self.game.id, date(2025, 9, 2), [7, 8, 9, 10, 11, 12])

        other = self.store.find_game('6/45')
        self.store.create_result(other.id, date(2025, 9, 2), [1, 2, 3, 4, 5, 6])
        self.assertEqual(self.store.count_results(), 2)

    def test_list_order_and_filters(self):
        for day in (2, 4, 6):
            self.store.create_result(self.game.id, date(2025, 9, day), [1, 2, 3, 4, 5, 6], day * 1000000)

        newest_first = [result.draw_date.day for result in self.store.list_results()]
        self.assertEqual(newest_first, [6, 4, 2])
        oldest_first = [result.draw_date.day for result in self.store.list_results(ascending=True, limit=2)]
        self.assertEqual(oldest_first, [2, 4])

        ranged = self.store.list_results(start_date=date(2025, 9, 3), end_date=date(2025, 9, 5))
        self.assertEqual([result.draw_date.day for result in ranged], [4])
        self.assertEqual(self.store.count_results(min_jackpot=4000000), 2)
        self.assertEqual(len(self.store.list_results(limit=1, offset=1)), 1)

    def test_totals(self):
        self.assertIsNone(self.store.latest_created_at())
        self.store.create_result(self.game.id, date(2025, 9, 2), [1, 2, 3, 4, 5, 6], 100.0)
        self.store.create_result(self.game.id, date(2025, 9, 4), [1, 2, 3, 4, 5, 6])
        self.assertEqual(self.store.total_jackpot(), 100.0)
        self.assertIsNotNone(self.store.latest_created_at())


class TestLotteryDataManager(StoreContractMixin, unittest.TestCase):
    """SQLite store in a temporary directory"""

    def make_store(self):
        self.temp_dir = tempfile.mkdtemp()
        return LotteryDataManager(os.path.join(self.temp_dir, 'lottery.db'))

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_data_survives_reopen(self):
        self.store.create_result(self.game.id, date(2025, 9, 2), [1, 2, 3, 4, 5, 6])
        self.store.close()

        self.store = LotteryDataManager(os.path.join(self.temp_dir, 'lottery.db'))
        self.assertEqual(self.store.count_results(), 1)

    def test_closed_store_is_unavailable(self):
        self.store.close()
        with self.assertRaises(StoreUnavailableError):
            self.store.find_game('6/42')

    def test_bad_parameter_is_not_unavailable(self):
        with self.assertRaises(StoreError) as ctx:
            self.store.find_game(['6/42'])
        self.assertNotIsInstance(ctx.exception, StoreUnavailableError)
        # connection stays usable
        self.assertEqual(self.store.find_game('6/42').name, '6/42')

    def test_factory_shares_instances(self):
        path = os.path.join(self.temp_dir, 'shared.db')
        self.assertIs(get_data_manager(path), get_data_manager(path))
        get_data_manager(path).close()


class TestInMemoryResultStore(StoreContractMixin, unittest.TestCase):

    def make_store(self):
        return InMemoryResultStore()


if __name__ == '__main__':
    unittest.main()
