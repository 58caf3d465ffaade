"""
Data schema definitions for lottery draw results, import summaries and statistics
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from config import AppConfig


class DrawKey(NamedTuple):
    """Composite identity of a draw: one result per game per draw date"""
    game_name: str
    draw_date: date


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, (date, datetime)) else value


@dataclass
class DrawRecord:
    """Candidate draw result as received from a source, not yet validated"""
    game_name: Any
    draw_date: Any
    numbers: Any
    jackpot: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DrawRecord':
        """Create from a boundary dictionary (camelCase or snake_case keys)"""
        return cls(
            game_name=_first_present(data, 'gameName', 'game_name', 'game'),
            draw_date=_first_present(data, 'drawDate', 'draw_date', 'date'),
            numbers=data.get('numbers'),
            jackpot=data.get('jackpot'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gameName': self.game_name,
            'drawDate': _iso(self.draw_date),
            'numbers': list(self.numbers) if isinstance(self.numbers, (list, tuple)) else self.numbers,
            'jackpot': self.jackpot,
        }


@dataclass(frozen=True)
class CleanRecord:
    """Validated, normalized draw result ready for persistence"""
    game_name: str
    draw_date: date
    numbers: Tuple[int, ...]
    jackpot: Optional[float] = None

    @property
    def key(self) -> DrawKey:
        return DrawKey(self.game_name, self.draw_date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gameName': self.game_name,
            'drawDate': self.draw_date.isoformat(),
            'numbers': list(self.numbers),
            'jackpot': self.jackpot,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one candidate record"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'isValid': self.is_valid, 'errors': list(self.errors), 'warnings': list(self.warnings)}


@dataclass
class InvalidResult:
    """A rejected candidate together with the validator's findings"""
    record: DrawRecord
    validation: ValidationResult

    def to_dict(self) -> Dict[str, Any]:
        return {'data': self.record.to_dict(), 'validation': self.validation.to_dict()}


@dataclass
class ImportOptions:
    skip_duplicates: bool = True
    validate_data: bool = True
    batch_size: int = AppConfig.DEFAULT_BATCH_SIZE

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")


@dataclass
class ImportDetails:
    total: int = 0
    valid: int = 0
    invalid: int = 0
    duplicates: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'valid': self.valid,
            'invalid': self.invalid,
            'duplicates': self.duplicates,
        }


@dataclass
class ImportResult:
    """
    Summary of one import invocation.

    ``errors`` only carries reference errors, persistence errors and
    setup-level aborts; validation rejections are listed in
    ``invalid_results`` and summarized in ``warnings``.
    """
    success: bool
    imported: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    details: ImportDetails = field(default_factory=ImportDetails)
    invalid_results: List[InvalidResult] = field(default_factory=list)

    @classmethod
    def failed(cls, errors: List[str]) -> 'ImportResult':
        """Result for an import that aborted before any record was processed"""
        return cls(success=False, errors=list(errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'imported': self.imported,
            'skipped': self.skipped,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'details': self.details.to_dict(),
            'invalidResults': [invalid.to_dict() for invalid in self.invalid_results],
        }


@dataclass
class FetchResult:
    """What a data source hands back for one game and date range"""
    success: bool
    data: List[CleanRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    source: str = 'unknown'
    fetched_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class StoredGame:
    id: int
    name: str
    description: Optional[str]
    max_number: int
    number_count: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoredResult:
    """A persisted draw result row"""
    id: int
    game_id: int
    game_name: str
    draw_date: date
    numbers: Tuple[int, ...]
    jackpot: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self, description: Optional[str] = None) -> Dict[str, Any]:
        return {
            'id': self.id,
            'gameName': self.game_name,
            'gameDescription': description or AppConfig.get_game_description(self.game_name),
            'drawDate': self.draw_date.isoformat(),
            'numbers': list(self.numbers),
            'jackpot': self.jackpot,
            'createdAt': _iso(self.created_at),
        }


@dataclass
class DateRange:
    earliest: Optional[date] = None
    latest: Optional[date] = None
    days_covered: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'earliest': _iso(self.earliest),
            'latest': _iso(self.latest),
            'daysCovered': self.days_covered,
        }


@dataclass
class PatternAnalysis:
    """Pattern metrics over the trailing window of draws; percentages use one decimal"""
    window_size: int = 0
    even_pct: float = 0.0
    odd_pct: float = 0.0
    high_pct: float = 0.0
    low_pct: float = 0.0
    consecutive_count: int = 0
    consecutive_pct: float = 0.0
    missing_numbers: List[int] = field(default_factory=list)
    coverage_pct: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'windowSize': self.window_size,
            'evenOddRatio': {'even': self.even_pct, 'odd': self.odd_pct},
            'highLowRatio': {'high': self.high_pct, 'low': self.low_pct},
            'consecutiveNumbers': {'frequency': self.consecutive_count, 'percentage': self.consecutive_pct},
            'numberGaps': {
                'missingNumbers': list(self.missing_numbers),
                'missingCount': len(self.missing_numbers),
                'coverage': self.coverage_pct,
            },
        }


@dataclass
class GameStatistics:
    game_name: str
    total_draws: int = 0
    date_range: DateRange = field(default_factory=DateRange)
    number_frequency: Dict[int, int] = field(default_factory=dict)
    hot_numbers: List[int] = field(default_factory=list)
    cold_numbers: List[int] = field(default_factory=list)
    average_jackpot: float = 0.0
    largest_jackpot: float = 0.0
    patterns: PatternAnalysis = field(default_factory=PatternAnalysis)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gameName': self.game_name,
            'totalDraws': self.total_draws,
            'dateRange': self.date_range.to_dict(),
            'numberFrequency': {str(number): count for number, count in sorted(self.number_frequency.items())},
            'hotNumbers': list(self.hot_numbers),
            'coldNumbers': list(self.cold_numbers),
            'averageJackpot': self.average_jackpot,
            'largestJackpot': self.largest_jackpot,
            'patterns': self.patterns.to_dict(),
        }
