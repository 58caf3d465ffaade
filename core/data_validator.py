"""
Validate and normalize candidate lottery draw results against the game catalog
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from config import AppConfig, GameConfig
from schema import CleanRecord, DrawRecord, InvalidResult, ValidationResult

RecordLike = Union[DrawRecord, CleanRecord, Dict[str, Any]]


@dataclass
class BatchValidation:
    """Partition of a candidate set into clean records and rejects"""
    valid_results: List[CleanRecord] = field(default_factory=list)
    invalid_results: List[InvalidResult] = field(default_factory=list)
    total: int = 0
    warnings: int = 0

    @property
    def summary(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'valid': len(self.valid_results),
            'invalid': len(self.invalid_results),
            'warnings': self.warnings,
        }


class DataValidator:
    """Validate and normalize lottery draw data"""

    logger = logging.getLogger(__name__)

    @staticmethod
    def parse_draw_date(value: Any) -> Optional[date]:
        """
        Parse a draw date from a date, datetime or string.
        Accepts anything pandas can read (YYYY-MM-DD, MM/DD/YYYY, Sep 2, 2025, ...).
        Returns None when the value is not a valid calendar date.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, datetime):
            return None if pd.isna(value) else value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        # pandas also reads relative keywords such as "today" and "now"
        if not re.search(r'\d', value):
            return None

        try:
            parsed = pd.to_datetime(value.strip(), errors='coerce')
        except (ValueError, OverflowError) as e:
            DataValidator.logger.debug(f"Failed to parse date '{value}': {e}")
            return None
        if pd.isna(parsed):
            return None
        return parsed.date()

    @staticmethod
    def is_integer_value(num: Any) -> bool:
        """True for ints and integral floats (7.0), never for bools or strings"""
        if isinstance(num, (bool, np.bool_)):
            return False
        if isinstance(num, (int, np.integer)):
            return True
        if isinstance(num, (float, np.floating)):
            return math.isfinite(num) and float(num).is_integer()
        return False

    @staticmethod
    def as_draw_record(record: RecordLike) -> DrawRecord:
        if isinstance(record, DrawRecord):
            return record
        if isinstance(record, CleanRecord):
            return DrawRecord(record.game_name, record.draw_date, list(record.numbers), record.jackpot)
        if isinstance(record, Mapping):
            return DrawRecord.from_dict(dict(record))
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    @staticmethod
    def validate_draw_record(record: RecordLike,
                             catalog: Optional[Mapping[str, GameConfig]] = None,
                             today: Optional[date] = None) -> ValidationResult:
        """
        Validate a single candidate draw result.

        Every rule is evaluated and all failures are collected. An unknown
        game skips the number checks since there is nothing to check against.

        Args:
            record: DrawRecord, CleanRecord or boundary dictionary
            catalog: Game catalog, defaults to AppConfig.GAMES
            today: Reference date for the "future draw" warning

        Returns:
            ValidationResult with errors (fatal) and warnings (informational)
        """
        record = DataValidator.as_draw_record(record)
        catalog = AppConfig.GAMES if catalog is None else catalog
        today = today or date.today()
        errors: List[str] = []
        warnings: List[str] = []

        # Game name
        game_config = None
        if not isinstance(record.game_name, str) or not record.game_name.strip():
            errors.append('Game name is required and must be a string')
        else:
            game_config = catalog.get(record.game_name.strip())
            if game_config is None:
                errors.append(
                    f"Invalid game name: {record.game_name}. Must be one of: {', '.join(catalog.keys())}"
                )

        # Draw date
        draw_date = DataValidator.parse_draw_date(record.draw_date)
        if draw_date is None:
            errors.append('Invalid draw date format')
        else:
            if draw_date > today:
                warnings.append('Draw date is in the future')
            if draw_date < AppConfig.HISTORY_START_DATE:
                warnings.append(
                    f"Draw date is before lottery history ({AppConfig.HISTORY_START_DATE.isoformat()})"
                )

        # Numbers
        numbers = record.numbers
        if isinstance(numbers, np.ndarray):
            numbers = numbers.tolist()
        if not isinstance(numbers, (list, tuple)):
            errors.append('Numbers must be an array')
        elif game_config is not None:
            if len(numbers) != game_config.number_count:
                errors.append(f"Expected {game_config.number_count} numbers, got {len(numbers)}")

            all_in_range = True
            for index, num in enumerate(numbers):
                if not DataValidator.is_integer_value(num):
                    errors.append(f"Number at index {index} is not an integer: {num}")
                    all_in_range = False
                elif num < 1 or num > game_config.max_number:
                    errors.append(
                        f"Number {num} at index {index} is out of range (1-{game_config.max_number})"
                    )
                    all_in_range = False

            integral = [int(num) for num in numbers if DataValidator.is_integer_value(num)]
            if len(set(integral)) != len(integral):
                errors.append('Duplicate numbers found in the array')

            if all_in_range and integral != sorted(integral):
                warnings.append('Numbers are not in ascending order')

        # Jackpot (optional)
        jackpot = record.jackpot
        if jackpot is not None:
            is_number = isinstance(jackpot, (int, float, np.integer, np.floating)) and not isinstance(jackpot, (bool, np.bool_))
            if not is_number or not math.isfinite(jackpot) or jackpot < 0:
                errors.append('Jackpot must be a non-negative number')

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    @staticmethod
    def clean_draw_record(record: RecordLike) -> CleanRecord:
        """
        Normalize a record that passed validation: trimmed game name, date
        value, numbers sorted ascending, jackpot rounded to 2 decimal places.
        Cleaning a CleanRecord returns an equal record.
        """
        record = DataValidator.as_draw_record(record)
        draw_date = DataValidator.parse_draw_date(record.draw_date)
        if draw_date is None:
            raise ValueError(f"Cannot clean record with invalid draw date: {record.draw_date}")

        numbers = record.numbers.tolist() if isinstance(record.numbers, np.ndarray) else record.numbers
        jackpot = None if record.jackpot is None else round(float(record.jackpot), 2)

        return CleanRecord(
            game_name=record.game_name.strip(),
            draw_date=draw_date,
            numbers=tuple(sorted(int(num) for num in numbers)),
            jackpot=jackpot,
        )

    @staticmethod
    def validate_draw_records(records: List[RecordLike],
                              catalog: Optional[Mapping[str, GameConfig]] = None,
                              today: Optional[date] = None) -> BatchValidation:
        """
        Validate multiple records, cleaning the valid ones

        Returns:
            BatchValidation with clean valid records, rejects and a warning count
        """
        batch = BatchValidation(total=len(records))
        for record in records:
            validation = DataValidator.validate_draw_record(record, catalog, today)
            if validation.is_valid:
                batch.valid_results.append(DataValidator.clean_draw_record(record))
                batch.warnings += len(validation.warnings)
            else:
                batch.invalid_results.append(InvalidResult(DataValidator.as_draw_record(record), validation))
        return batch
