"""
Lottery statistics engine

calculate_game_statistics() is a pure function of a game configuration and
its draw history. LotteryAnalytics wraps it with store queries for the CLI:
number analysis, per-game summaries, system totals and result search.
"""

import logging
import math
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from config import AppConfig, GameConfig
from core.data_manager import ResultStore
from schema import DateRange, GameStatistics, PatternAnalysis, StoredGame


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def _pct(part: float, whole: float) -> float:
    """Percentage with one decimal, 0 when there is nothing to divide by"""
    return round(part / whole * 100, 1) if whole else 0.0


def most_recent(results: Sequence[Any], window: int) -> List[Any]:
    """The `window` most recent draws, newest first"""
    return sorted(results, key=lambda result: _as_date(result.draw_date), reverse=True)[:window]


def calculate_even_odd_ratio(results: Sequence[Any]) -> Tuple[float, float]:
    even = sum(1 for result in results for num in result.numbers if num % 2 == 0)
    odd = sum(1 for result in results for num in result.numbers if num % 2 != 0)
    total = even + odd
    return _pct(even, total), _pct(odd, total)


def calculate_high_low_ratio(results: Sequence[Any], max_number: int) -> Tuple[float, float]:
    """High means strictly above ceil(max_number / 2)"""
    midpoint = math.ceil(max_number / 2)
    high = sum(1 for result in results for num in result.numbers if num > midpoint)
    low = sum(1 for result in results for num in result.numbers if num <= midpoint)
    total = high + low
    return _pct(high, total), _pct(low, total)


def find_consecutive_patterns(results: Sequence[Any], number_count: int) -> Tuple[int, float]:
    """Adjacent-by-one pairs within each sorted draw, and their rate per drawn number"""
    consecutive = 0
    for result in results:
        ordered = sorted(result.numbers)
        consecutive += sum(1 for low, high in zip(ordered, ordered[1:]) if high == low + 1)
    return consecutive, _pct(consecutive, len(results) * number_count)


def calculate_number_gaps(results: Sequence[Any], max_number: int) -> Tuple[List[int], float]:
    """Numbers never drawn in `results`, and the coverage of 1..max_number"""
    drawn = {num for result in results for num in result.numbers}
    missing = [num for num in range(1, max_number + 1) if num not in drawn]
    return missing, _pct(max_number - len(missing), max_number)


def analyze_patterns(game_config: GameConfig, results: Sequence[Any],
                     window: Optional[int] = None) -> PatternAnalysis:
    """Pattern metrics over the trailing window of draws"""
    window = AppConfig.PATTERN_WINDOW if window is None else window
    recent = most_recent(results, window)
    if not recent:
        return PatternAnalysis()

    even_pct, odd_pct = calculate_even_odd_ratio(recent)
    high_pct, low_pct = calculate_high_low_ratio(recent, game_config.max_number)
    consecutive_count, consecutive_pct = find_consecutive_patterns(recent, game_config.number_count)
    missing, coverage = calculate_number_gaps(recent, game_config.max_number)

    return PatternAnalysis(
        window_size=len(recent),
        even_pct=even_pct,
        odd_pct=odd_pct,
        high_pct=high_pct,
        low_pct=low_pct,
        consecutive_count=consecutive_count,
        consecutive_pct=consecutive_pct,
        missing_numbers=missing,
        coverage_pct=coverage
    )


def calculate_game_statistics(game_config: GameConfig, results: Sequence[Any],
                              pattern_window: Optional[int] = None) -> GameStatistics:
    """
    Descriptive statistics for one game's draw history.

    Args:
        game_config: Game the results belong to
        results: Draws exposing draw_date, numbers and jackpot (any order)
        pattern_window: Number of most recent draws used for pattern metrics

    Returns:
        GameStatistics; all-zero with empty collections when results is empty
    """
    if not results:
        return GameStatistics(game_name=game_config.name)

    # Date range
    dates = sorted(_as_date(result.draw_date) for result in results)
    earliest, latest = dates[0], dates[-1]
    date_range = DateRange(earliest=earliest, latest=latest, days_covered=math.ceil((latest - earliest).days))

    # Number frequency
    frequency = Counter(int(num) for result in results for num in result.numbers)

    # Hot and cold numbers: by frequency, ties by number
    ranked = [num for num, _ in sorted(frequency.items(), key=lambda item: (-item[1], item[0]))]
    hot_numbers = ranked[:AppConfig.HOT_COLD_COUNT]
    cold_numbers = ranked[-AppConfig.HOT_COLD_COUNT:][::-1]

    # Jackpots: only defined, positive amounts count
    jackpots = np.array([float(result.jackpot) for result in results
                         if result.jackpot is not None and result.jackpot > 0])
    average_jackpot = float(jackpots.mean()) if jackpots.size else 0.0
    largest_jackpot = float(jackpots.max()) if jackpots.size else 0.0

    return GameStatistics(
        game_name=game_config.name,
        total_draws=len(results),
        date_range=date_range,
        number_frequency=dict(frequency),
        hot_numbers=hot_numbers,
        cold_numbers=cold_numbers,
        average_jackpot=average_jackpot,
        largest_jackpot=largest_jackpot,
        patterns=analyze_patterns(game_config, results, pattern_window)
    )


class LotteryAnalytics:
    """Store-backed statistics and result browsing"""

    def __init__(self, store: ResultStore, catalog: Optional[Mapping[str, GameConfig]] = None):
        self.store = store
        self.catalog = AppConfig.GAMES if catalog is None else catalog
        self.logger = logging.getLogger(__name__)

    def _game_config(self, game: StoredGame) -> GameConfig:
        config = self.catalog.get(game.name)
        if config is not None:
            return config
        return GameConfig(game.name, game.description or game.name, game.number_count,
                          game.max_number, frozenset())

    def _require_game(self, game_name: str) -> StoredGame:
        game = self.store.find_game(game_name)
        if game is None:
            raise KeyError(f"Game not found: {game_name}")
        return game

    def get_game_statistics(self, game_name: str, limit: Optional[int] = None,
                            pattern_window: Optional[int] = None) -> GameStatistics:
        """Statistics over the game's most recent `limit` draws (all when None)"""
        game = self._require_game(game_name)
        results = self.store.list_results(game_id=game.id, limit=limit)
        return calculate_game_statistics(self._game_config(game), results, pattern_window)

    def get_number_analysis(self, game_name: str, limit: int = None,
                            pattern_window: Optional[int] = None) -> Dict[str, Any]:
        limit = AppConfig.ANALYSIS_DRAW_LIMIT if limit is None else limit
        game = self._require_game(game_name)
        statistics = self.get_game_statistics(game_name, limit, pattern_window)
        self.logger.info(f"Analyzed {statistics.total_draws} draws for {game_name}")

        analysis = statistics.to_dict()
        analysis['gameConfig'] = {'maxNumber': game.max_number, 'numberCount': game.number_count}
        return analysis

    def get_game_summary(self, game_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Result counts and date coverage per game (one game when named)"""
        if game_name:
            game = self.store.find_game(game_name)
            games = [game] if game else []
        else:
            games = self.store.list_games()

        summaries = []
        for game in games:
            oldest = self.store.list_results(game_id=game.id, ascending=True, limit=1)
            latest = self.store.list_results(game_id=game.id, limit=1)
            oldest_date = oldest[0].draw_date if oldest else None
            latest_date = latest[0].draw_date if latest else None
            summaries.append({
                'gameName': game.name,
                'gameDescription': game.description,
                'maxNumber': game.max_number,
                'numberCount': game.number_count,
                'totalResults': self.store.count_results(game_id=game.id),
                'oldestResult': oldest_date.isoformat() if oldest_date else None,
                'latestResult': latest_date.isoformat() if latest_date else None,
                'dateRange': (latest_date - oldest_date).days if oldest_date and latest_date else 0,
            })
        return summaries

    def get_system_statistics(self) -> Dict[str, Any]:
        last_updated = self.store.latest_created_at()
        game_statistics = [
            calculate_game_statistics(self._game_config(game), self.store.list_results(game_id=game.id)).to_dict()
            for game in self.store.list_games()
        ]
        return {
            'totalGames': self.store.count_games(),
            'totalResults': self.store.count_results(),
            'totalJackpotValue': self.store.total_jackpot(),
            'lastUpdated': last_updated.isoformat() if last_updated else None,
            'gameStatistics': game_statistics,
        }

    def get_recent_results(self, limit: int = 10) -> List[Dict[str, Any]]:
        descriptions = {game.id: game.description for game in self.store.list_games()}
        return [result.to_dict(descriptions.get(result.game_id))
                for result in self.store.list_results(limit=limit)]

    def search_results(self, game_name: Optional[str] = None, start_date: Optional[date] = None,
                       end_date: Optional[date] = None, numbers: Optional[Sequence[int]] = None,
                       min_jackpot: Optional[float] = None, max_jackpot: Optional[float] = None,
                       limit: int = None, offset: int = 0) -> Dict[str, Any]:
        """
        Newest-first page of results. An unknown game name is ignored as a
        filter; `numbers` keeps only draws containing every given number.
        A missing or non-positive limit means DEFAULT_PAGE_SIZE.
        """
        if not limit or limit <= 0:
            limit = AppConfig.DEFAULT_PAGE_SIZE
        limit = min(limit, AppConfig.MAX_PAGE_SIZE)
        offset = max(0, offset or 0)
        game_id = None
        if game_name:
            game = self.store.find_game(game_name)
            if game is not None:
                game_id = game.id
            else:
                self.logger.warning(f"Ignoring unknown game filter: {game_name}")

        filters = dict(game_id=game_id, start_date=start_date, end_date=end_date,
                       min_jackpot=min_jackpot, max_jackpot=max_jackpot)
        descriptions = {game.id: game.description for game in self.store.list_games()}

        if numbers:
            wanted = set(numbers)
            matching = [result for result in self.store.list_results(**filters)
                        if wanted.issubset(result.numbers)]
            total = len(matching)
            page = matching[offset:offset + limit]
        else:
            total = self.store.count_results(**filters)
            page = self.store.list_results(limit=limit, offset=offset, **filters)

        return {
            'results': [result.to_dict(descriptions.get(result.game_id)) for result in page],
            'pagination': {
                'total': total,
                'limit': limit,
                'offset': offset,
                'hasMore': offset + limit < total,
            },
        }
