"""
Pick the configured results data source
"""

from config import AppConfig
from data_sources.base import ResultsDataSource
from data_sources.live_scraper import PCSOResultsScraper
from data_sources.mock_source import MockResultsSource

DATA_SOURCES = {
    'mock': MockResultsSource,
    'pcso': PCSOResultsScraper,
}


def get_data_source(name: str = None) -> ResultsDataSource:
    """Instantiate the data source named in configuration (LOTTO_DATA_SOURCE)"""
    name = (name or AppConfig.DATA_SOURCE).strip().lower()
    if name not in DATA_SOURCES:
        raise ValueError(f"Unknown data source '{name}'. Must be one of: {', '.join(DATA_SOURCES)}")
    return DATA_SOURCES[name]()
