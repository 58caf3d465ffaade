"""
Data source capability shared by every provider of raw draw results
"""

import abc
import logging
from datetime import date
from typing import Iterable, List, Tuple

from core.data_validator import DataValidator
from schema import CleanRecord, DrawRecord, FetchResult


class DataSourceError(Exception):
    """Raised when a source cannot deliver data (network, HTTP or parse failure)"""


class ResultsDataSource(abc.ABC):
    """Abstract results provider."""

    source_name = 'unknown'

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__)

    @abc.abstractmethod
    def fetch(self, game_name: str, start_date: date, end_date: date) -> FetchResult:
        """Return validated, cleaned draws for one game within [start_date, end_date].

        Implementations report transport failures as ``FetchResult(success=False)``
        rather than raising.
        """

    def close(self) -> None:
        """Optional hook for sources that hold connections."""
        return None

    def _validate_and_clean(self, candidates: Iterable[DrawRecord]) -> Tuple[List[CleanRecord], List[str]]:
        """Keep valid candidates (cleaned); describe the rejected ones"""
        cleaned, errors = [], []
        for candidate in candidates:
            validation = DataValidator.validate_draw_record(candidate)
            if validation.is_valid:
                cleaned.append(DataValidator.clean_draw_record(candidate))
            else:
                errors.append(f"Invalid result for {candidate.draw_date}: {', '.join(validation.errors)}")
        if errors:
            self.logger.warning(f"{self.source_name}: {len(errors)} fetched results failed validation")
        return cleaned, errors

    def _failure(self, message: str) -> FetchResult:
        self.logger.error(f"{self.source_name}: {message}")
        return FetchResult(success=False, errors=[f"Scraping failed: {message}"], source=self.source_name)
