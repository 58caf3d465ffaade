"""
Centralized configuration management for the PCSO Lotto results tracker
"""

import os
from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, List, Optional

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a specific lottery game"""
    name: str
    description: str
    number_count: int
    max_number: int
    draw_days: FrozenSet[str]

    def __post_init__(self):
        if self.number_count <= 0 or self.max_number <= 0:
            raise ValueError(f"Game {self.name}: number_count and max_number must be positive")
        if self.number_count > self.max_number:
            raise ValueError(
                f"Game {self.name}: number_count ({self.number_count}) exceeds max_number ({self.max_number})"
            )
        unknown_days = set(self.draw_days) - set(WEEKDAYS)
        if unknown_days:
            raise ValueError(f"Game {self.name}: unknown draw days {sorted(unknown_days)}")

    def is_draw_day(self, day: date) -> bool:
        return WEEKDAYS[day.weekday()] in self.draw_days


def _env_date(name: str, default: str) -> date:
    return date.fromisoformat(os.getenv(name, default))


class AppConfig:
    """Application-wide configuration"""

    # Game configurations
    GAMES = {
        '6/42': GameConfig(
            name='6/42',
            description='Lotto 6/42',
            number_count=6,
            max_number=42,
            draw_days=frozenset({'Tuesday', 'Thursday', 'Saturday'})
        ),
        '6/45': GameConfig(
            name='6/45',
            description='Mega Lotto 6/45',
            number_count=6,
            max_number=45,
            draw_days=frozenset({'Monday', 'Wednesday', 'Friday'})
        ),
        '6/49': GameConfig(
            name='6/49',
            description='Super Lotto 6/49',
            number_count=6,
            max_number=49,
            draw_days=frozenset({'Tuesday', 'Thursday', 'Sunday'})
        ),
        '6/55': GameConfig(
            name='6/55',
            description='Grand Lotto 6/55',
            number_count=6,
            max_number=55,
            draw_days=frozenset({'Monday', 'Wednesday', 'Saturday'})
        ),
        '6/58': GameConfig(
            name='6/58',
            description='Ultra Lotto 6/58',
            number_count=6,
            max_number=58,
            draw_days=frozenset({'Tuesday', 'Friday', 'Sunday'})
        )
    }

    # Validation boundaries
    HISTORY_START_DATE = _env_date('LOTTO_HISTORY_START', '1995-01-01')
    DEFAULT_IMPORT_START = _env_date('LOTTO_IMPORT_START', '2000-01-01')

    # Import settings
    DEFAULT_BATCH_SIZE = int(os.getenv('LOTTO_BATCH_SIZE', '100'))
    INTER_GAME_DELAY = float(os.getenv('LOTTO_INTER_GAME_DELAY', '2'))  # seconds between games

    # Directories and storage
    DATA_DIR = os.getenv('LOTTO_DATA_DIR', 'data')
    LOG_DIR = os.getenv('LOTTO_LOG_DIR', 'logs')
    DB_PATH = os.getenv('LOTTO_DB_PATH', os.path.join(DATA_DIR, 'lottery.db'))

    # Data source selection: 'mock' or 'pcso'
    DATA_SOURCE = os.getenv('LOTTO_DATA_SOURCE', 'mock')

    # Scraping settings
    PCSO_RESULTS_URL = os.getenv('LOTTO_PCSO_URL', 'https://www.pcso.gov.ph/SearchLottoResult.aspx')
    SCRAPER_TIMEOUT = int(os.getenv('LOTTO_SCRAPER_TIMEOUT', '30'))
    SCRAPER_RETRIES = int(os.getenv('LOTTO_SCRAPER_RETRIES', '3'))

    # HTTP Headers
    HTTP_HEADERS = {
        'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
        'Accept-Language': 'en-PH,en-US;q=0.7,en;q=0.3',
        'Accept-Encoding': 'gzip, deflate',
        'Connection': 'keep-alive',
        'Upgrade-Insecure-Requests': '1',
        'Referer': 'https://www.pcso.gov.ph/'
    }

    # Baseline jackpot per game, used by the mock data source
    BASE_JACKPOTS = {
        '6/42': 5000000,
        '6/45': 8000000,
        '6/49': 15000000,
        '6/55': 25000000,
        '6/58': 45000000
    }

    # Analysis settings
    PATTERN_WINDOW = int(os.getenv('LOTTO_PATTERN_WINDOW', '20'))
    ANALYSIS_DRAW_LIMIT = int(os.getenv('LOTTO_ANALYSIS_LIMIT', '100'))
    HOT_COLD_COUNT = 10

    # Result browsing
    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 200

    @classmethod
    def get_game_config(cls, game: str) -> Optional[GameConfig]:
        """Get configuration for a specific game"""
        return cls.GAMES.get(game)

    @classmethod
    def get_supported_games(cls) -> List[str]:
        """Get list of supported game names"""
        return list(cls.GAMES.keys())

    @classmethod
    def get_game_description(cls, game: str) -> str:
        """Get display description for a game"""
        game_config = cls.get_game_config(game)
        return game_config.description if game_config else game
