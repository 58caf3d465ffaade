"""
Deterministic generated draw history, used for demos and tests
"""

import random
from datetime import date, datetime, timedelta
from typing import List

from config import AppConfig
from data_sources.base import ResultsDataSource
from schema import DrawRecord, FetchResult


class MockResultsSource(ResultsDataSource):
    """
    Generates one draw per scheduled draw day in the requested range.

    Each draw is seeded from (game, draw date), so overlapping ranges and
    repeated fetches always produce the same numbers and jackpot.
    """

    source_name = 'PCSO Official Website (Mock)'

    def __init__(self, catalog=None, seed: str = 'pcso'):
        super().__init__()
        self.catalog = AppConfig.GAMES if catalog is None else catalog
        self.seed = seed

    def fetch(self, game_name: str, start_date: date, end_date: date) -> FetchResult:
        self.logger.info(f"Generating {game_name} results from {start_date} to {end_date}")
        candidates = self.generate_draws(game_name, start_date, end_date)
        data, errors = self._validate_and_clean(candidates)
        return FetchResult(success=True, data=data, errors=errors, source=self.source_name,
                           fetched_at=datetime.now())

    def generate_draws(self, game_name: str, start_date: date, end_date: date) -> List[DrawRecord]:
        game_config = self.catalog.get(game_name)
        if game_config is None:
            self.logger.warning(f"No configuration for game {game_name}, nothing generated")
            return []

        base_jackpot = AppConfig.BASE_JACKPOTS.get(game_name, 10000000)
        draws = []
        current = start_date
        while current <= end_date:
            if game_config.is_draw_day(current):
                rng = random.Random(f"{self.seed}|{game_name}|{current.isoformat()}")
                numbers = sorted(rng.sample(range(1, game_config.max_number + 1), game_config.number_count))
                multiplier = 0.5 + rng.random() * 2  # 0.5x to 2.5x the base amount
                draws.append(DrawRecord(
                    game_name=game_name,
                    draw_date=current,
                    numbers=numbers,
                    jackpot=float(round(base_jackpot * multiplier))
                ))
            current += timedelta(days=1)
        return draws
