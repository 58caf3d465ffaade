"""
Batch import of lottery draw results

Pipeline per import call:
1. validate + clean every candidate (pure)
2. per record, in fixed-size chunks: resolve game -> persisted-duplicate check -> persist
3. aggregate counts into one ImportResult

Per-record failures are recorded and the batch continues. Only a store that
cannot be reached aborts the whole call.
"""

import logging
import time
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from config import AppConfig, GameConfig
from core.data_manager import ResultStore, StoreUnavailableError
from core.data_validator import DataValidator, RecordLike
from core.deduplicator import detect_duplicates, is_persisted_duplicate
from data_sources.base import ResultsDataSource
from schema import CleanRecord, DrawRecord, ImportDetails, ImportOptions, ImportResult
from utils.data_extraction import parse_results_csv


class ImportRequestError(ValueError):
    """The import request itself is malformed"""


class RecordOutcome(Enum):
    IMPORTED = 'imported'
    SKIPPED = 'skipped'
    FAILED = 'failed'


class BatchImporter:
    """Imports candidate draw results into a ResultStore"""

    def __init__(self, store: ResultStore, data_source: Optional[ResultsDataSource] = None,
                 catalog: Optional[Mapping[str, GameConfig]] = None,
                 inter_game_delay: Optional[float] = None, sleep=time.sleep):
        self.store = store
        self.data_source = data_source
        self.catalog = AppConfig.GAMES if catalog is None else catalog
        self.inter_game_delay = AppConfig.INTER_GAME_DELAY if inter_game_delay is None else inter_game_delay
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Stage 1: validate + clean
    # ------------------------------------------------------------------

    def _prepare(self, candidates: List[RecordLike], options: ImportOptions,
                 result: ImportResult) -> List[Union[CleanRecord, DrawRecord]]:
        if not options.validate_data:
            # trusted input, passed through uncleaned
            return [DataValidator.as_draw_record(candidate) for candidate in candidates]

        validation = DataValidator.validate_draw_records(candidates, self.catalog)
        result.invalid_results = validation.invalid_results
        if validation.invalid_results:
            result.warnings.append(f"{len(validation.invalid_results)} invalid results found")
            self.logger.warning(f"{len(validation.invalid_results)} of {validation.total} results failed validation")
        if validation.warnings:
            self.logger.warning(f"Validation warnings: {validation.warnings}")

        duplicate_groups = detect_duplicates(validation.valid_results)
        if duplicate_groups:
            result.warnings.append(f"{len(duplicate_groups)} duplicate draw groups found in batch")
        return validation.valid_results

    # ------------------------------------------------------------------
    # Stage 2 + 3: duplicate check and persistence, one record at a time
    # ------------------------------------------------------------------

    def _process_record(self, record: Union[CleanRecord, DrawRecord],
                        options: ImportOptions) -> Tuple[RecordOutcome, Optional[str]]:
        game_name = record.game_name.strip() if isinstance(record.game_name, str) else record.game_name
        try:
            game = self.store.find_game(game_name)
            if game is None:
                return RecordOutcome.FAILED, f"Game not found: {game_name}"

            if isinstance(record, CleanRecord):
                draw_date = record.draw_date
            else:
                draw_date = DataValidator.parse_draw_date(record.draw_date)
                if draw_date is None:
                    raise ValueError(f"invalid draw date {record.draw_date!r}")

            if options.skip_duplicates and is_persisted_duplicate(self.store, game.id, draw_date):
                return RecordOutcome.SKIPPED, None

            self.store.create_result(game.id, draw_date, record.numbers, record.jackpot)
            return RecordOutcome.IMPORTED, None
        except StoreUnavailableError:
            raise
        except Exception as e:
            draw_date = record.draw_date.isoformat() if isinstance(record.draw_date, date) else record.draw_date
            message = f"Failed to import result for {game_name} on {draw_date}: {e}"
            self.logger.warning(message)
            return RecordOutcome.FAILED, message

    def _process_batch(self, batch: List[Union[CleanRecord, DrawRecord]],
                       options: ImportOptions) -> Tuple[int, int, List[str]]:
        imported, skipped, errors = 0, 0, []
        for record in batch:
            outcome, error = self._process_record(record, options)
            if outcome is RecordOutcome.IMPORTED:
                imported += 1
            elif outcome is RecordOutcome.SKIPPED:
                skipped += 1
            else:
                errors.append(error)
        return imported, skipped, errors

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def import_results(self, candidates: Iterable[RecordLike],
                       options: Optional[ImportOptions] = None) -> ImportResult:
        """
        Import candidate results in chunks of options.batch_size.

        Returns:
            ImportResult; success is True only when no reference, persistence
            or setup error occurred (duplicates and invalid records don't count)
        """
        options = options or ImportOptions()
        candidates = list(candidates)
        total = len(candidates)
        result = ImportResult(success=False, details=ImportDetails(total=total))
        prepared: List[Union[CleanRecord, DrawRecord]] = []

        try:
            self.logger.info(f"Starting import of {total} lottery results...")
            prepared = self._prepare(candidates, options, result)

            for start in range(0, len(prepared), options.batch_size):
                batch = prepared[start:start + options.batch_size]
                imported, skipped, errors = self._process_batch(batch, options)
                result.imported += imported
                result.skipped += skipped
                result.errors.extend(errors)
                self.logger.info(
                    f"Processed batch {start // options.batch_size + 1}: {imported} imported, {skipped} skipped"
                )
        except Exception as e:
            message = f"Import failed: {e}"
            self.logger.error(message)
            result.errors.insert(0, message)
            result.success = False
            result.details = ImportDetails(total=total, valid=len(prepared), invalid=total - len(prepared),
                                           duplicates=result.skipped)
            return result

        result.success = not result.errors
        result.details = ImportDetails(total=total, valid=len(prepared), invalid=total - len(prepared),
                                       duplicates=result.skipped)
        self.logger.info(f"Import completed: {result.imported} imported, {result.skipped} skipped")
        return result

    def import_historical_data(self, game_type: str, start_date: date, end_date: date,
                               options: Optional[ImportOptions] = None) -> ImportResult:
        """Fetch one game's results from the data source and import them"""
        self.logger.info(f"Fetching historical data for {game_type} from {start_date} to {end_date}")
        if self.data_source is None:
            return ImportResult.failed(['No data source configured'])

        try:
            fetched = self.data_source.fetch(game_type, start_date, end_date)
        except Exception as e:
            self.logger.error(f"Data source failed for {game_type}: {e}")
            return ImportResult.failed([f"Scraping failed: {e}"])

        if not fetched.success:
            return ImportResult.failed(fetched.errors)

        # never trust the source's output as already clean
        result = self.import_results(fetched.data, options)
        result.warnings.extend(fetched.errors)
        return result

    def import_all_historical_data(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                                   options: Optional[ImportOptions] = None) -> Dict[str, ImportResult]:
        """Import every catalog game in turn, pausing between games"""
        start_date = start_date or AppConfig.DEFAULT_IMPORT_START
        end_date = end_date or date.today()
        self.logger.info(f"Starting historical import for all games from {start_date} to {end_date}")

        results: Dict[str, ImportResult] = {}
        for index, game_type in enumerate(self.catalog):
            if index and self.inter_game_delay > 0:
                self.sleep(self.inter_game_delay)
            self.logger.info(f"Processing {game_type}...")
            results[game_type] = self.import_historical_data(game_type, start_date, end_date, options)

        total_imported = sum(result.imported for result in results.values())
        total_skipped = sum(result.skipped for result in results.values())
        total_errors = sum(len(result.errors) for result in results.values())
        self.logger.info(
            f"Import summary: {total_imported} imported, {total_skipped} skipped, {total_errors} errors"
        )
        return results

    def import_from_csv(self, csv_content: str, options: Optional[ImportOptions] = None) -> ImportResult:
        """Parse CSV text (header row required) and import the parsed rows"""
        try:
            records, warnings = parse_results_csv(csv_content)
        except ValueError as e:
            self.logger.error(f"CSV parsing failed: {e}")
            return ImportResult.failed([f"CSV parsing failed: {e}"])

        result = self.import_results(records, options)
        result.warnings = warnings + result.warnings
        return result


def _request_date(request: Mapping[str, Any], key: str, required: bool) -> Optional[date]:
    value = request.get(key)
    if value in (None, ''):
        if required:
            raise ImportRequestError(f"{key} is required")
        return None
    parsed = DataValidator.parse_draw_date(value)
    if parsed is None:
        raise ImportRequestError(f"Invalid {key}: {value}")
    return parsed


def _request_options(request: Mapping[str, Any]) -> ImportOptions:
    raw = request.get('options') or {}
    if not isinstance(raw, Mapping):
        raise ImportRequestError('options must be an object')
    try:
        return ImportOptions(
            skip_duplicates=bool(raw.get('skipDuplicates', True)),
            validate_data=bool(raw.get('validateData', True)),
            batch_size=int(raw.get('batchSize', AppConfig.DEFAULT_BATCH_SIZE)),
        )
    except (TypeError, ValueError) as e:
        raise ImportRequestError(f"Invalid options: {e}") from e


def run_import_request(importer: BatchImporter,
                       request: Mapping[str, Any]) -> Union[ImportResult, Dict[str, ImportResult]]:
    """
    Dispatch a boundary import request:
      {"type": "results", "data": [...]}
      {"type": "historical", "gameType": ..., "startDate": ..., "endDate": ...}
      {"type": "all", "startDate"?: ..., "endDate"?: ...}
    """
    if not isinstance(request, Mapping):
        raise ImportRequestError('Import request must be an object')

    request_type = request.get('type')
    options = _request_options(request)

    if request_type == 'results':
        data = request.get('data')
        if not isinstance(data, list):
            raise ImportRequestError('Invalid data format. Expected array of lottery results.')
        if not all(isinstance(item, Mapping) for item in data):
            raise ImportRequestError('Invalid data format. Each lottery result must be an object.')
        return importer.import_results([DrawRecord.from_dict(dict(item)) for item in data], options)

    if request_type == 'historical':
        game_type = request.get('gameType')
        if not game_type:
            raise ImportRequestError('gameType, startDate, and endDate are required for historical import')
        start_date = _request_date(request, 'startDate', required=True)
        end_date = _request_date(request, 'endDate', required=True)
        return importer.import_historical_data(game_type, start_date, end_date, options)

    if request_type == 'all':
        return importer.import_all_historical_data(
            _request_date(request, 'startDate', required=False),
            _request_date(request, 'endDate', required=False),
            options
        )

    raise ImportRequestError('Invalid import type. Use "results", "historical", or "all"')
