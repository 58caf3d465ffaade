"""
PCSO Lotto Results Tracker - Command Line Entry Point

Imports draw results into the local SQLite store and reports statistics
over them. Every command prints JSON on stdout; logs go to stderr and to
logs/lotto_import_YYYYMMDD.log.

Examples:
  # Create the game catalog rows
  python main.py seed

  # Import results from a JSON request file ({"type": "results", "data": [...]})
  python main.py import --file request.json

  # Import a CSV export (Game Name, Draw Date, Numbers, Jackpot)
  python main.py import-csv --file results.csv

  # Import 6/45 draws for January 2024 from the live PCSO site
  python main.py --source pcso historical --game 6/45 --start 2024-01-01 --end 2024-01-31

  # Number analysis over the last 100 draws of 6/58
  python main.py stats --game 6/58
"""

import argparse
import json
import logging
import sys

from analytics import LotteryAnalytics
from config import AppConfig
from core.data_manager import StoreError, get_data_manager
from core.data_validator import DataValidator
from core.importer import BatchImporter, ImportRequestError, run_import_request
from data_sources.selector import get_data_source
from logging_config import setup_logging, get_logger
from schema import ImportOptions, ImportResult

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_IMPORT_FAILED = 1
EXIT_BAD_REQUEST = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PCSO Lotto results importer and statistics")
    parser.add_argument('--db', type=str, default=None, help=f'SQLite database path (default {AppConfig.DB_PATH})')
    parser.add_argument('--source', type=str, default=None, help='Data source: mock or pcso')
    parser.add_argument('--verbose', action='store_true', help='Log debug output to the console')
    parser.add_argument('--no-log-file', action='store_true', help='Only log to the console')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('seed', help='Create or update the game catalog rows')

    import_parser = subparsers.add_parser('import', help='Run a JSON import request')
    import_parser.add_argument('--file', type=str, required=True, help='Request file, "-" for stdin')

    csv_parser = subparsers.add_parser('import-csv', help='Import results from a CSV file')
    csv_parser.add_argument('--file', type=str, required=True)
    csv_parser.add_argument('--no-skip-duplicates', action='store_true')
    csv_parser.add_argument('--batch-size', type=int, default=AppConfig.DEFAULT_BATCH_SIZE)

    historical_parser = subparsers.add_parser('historical', help='Fetch and import one game')
    historical_parser.add_argument('--game', type=str, required=True, choices=AppConfig.get_supported_games())
    historical_parser.add_argument('--start', type=str, required=True, help='YYYY-MM-DD')
    historical_parser.add_argument('--end', type=str, required=True, help='YYYY-MM-DD')

    all_parser = subparsers.add_parser('import-all', help='Fetch and import every game')
    all_parser.add_argument('--start', type=str, default=None)
    all_parser.add_argument('--end', type=str, default=None)

    stats_parser = subparsers.add_parser('stats', help='Number analysis for one game')
    stats_parser.add_argument('--game', type=str, required=True)
    stats_parser.add_argument('--limit', type=int, default=AppConfig.ANALYSIS_DRAW_LIMIT)
    stats_parser.add_argument('--window', type=int, default=AppConfig.PATTERN_WINDOW)

    results_parser = subparsers.add_parser('results', help='Search stored results')
    results_parser.add_argument('--game', type=str, default=None)
    results_parser.add_argument('--start', type=str, default=None)
    results_parser.add_argument('--end', type=str, default=None)
    results_parser.add_argument('--numbers', type=str, default=None, help='Comma-separated, e.g. 3,17,42')
    results_parser.add_argument('--min-jackpot', type=float, default=None)
    results_parser.add_argument('--max-jackpot', type=float, default=None)
    results_parser.add_argument('--limit', type=int, default=AppConfig.DEFAULT_PAGE_SIZE)
    results_parser.add_argument('--offset', type=int, default=0)

    subparsers.add_parser('summary', help='Per-game summary and system totals')

    return parser


def print_json(payload):
    print(json.dumps(payload, indent=2, default=str))


def _payload(outcome):
    if isinstance(outcome, ImportResult):
        return outcome.to_dict()
    return {game: result.to_dict() for game, result in outcome.items()}


def _succeeded(outcome) -> bool:
    if isinstance(outcome, ImportResult):
        return outcome.success
    return all(result.success for result in outcome.values())


def _cli_date(value):
    if value is None:
        return None
    parsed = DataValidator.parse_draw_date(value)
    if parsed is None:
        raise ImportRequestError(f"Invalid date: {value}")
    return parsed


def _read_text(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def run_command(args) -> int:
    store = get_data_manager(args.db)
    store.seed_games(AppConfig.GAMES.values())

    if args.command == 'seed':
        print_json([game.name for game in store.list_games()])
        return EXIT_OK

    if args.command in ('import', 'import-csv', 'historical', 'import-all'):
        data_source = get_data_source(args.source) if args.command in ('historical', 'import-all') else None
        importer = BatchImporter(store, data_source)

        if args.command == 'import':
            try:
                request = json.loads(_read_text(args.file))
            except json.JSONDecodeError as e:
                raise ImportRequestError(f"Invalid JSON request: {e}") from e
            if isinstance(request, list):
                request = {'type': 'results', 'data': request}
            outcome = run_import_request(importer, request)
        elif args.command == 'import-csv':
            options = ImportOptions(skip_duplicates=not args.no_skip_duplicates, batch_size=args.batch_size)
            outcome = importer.import_from_csv(_read_text(args.file), options)
        elif args.command == 'historical':
            outcome = importer.import_historical_data(args.game, _cli_date(args.start), _cli_date(args.end))
        else:
            outcome = importer.import_all_historical_data(_cli_date(args.start), _cli_date(args.end))

        print_json(_payload(outcome))
        return EXIT_OK if _succeeded(outcome) else EXIT_IMPORT_FAILED

    analytics = LotteryAnalytics(store)

    if args.command == 'stats':
        print_json(analytics.get_number_analysis(args.game, args.limit, args.window))
    elif args.command == 'results':
        numbers = None
        if args.numbers:
            try:
                numbers = [int(n) for n in args.numbers.split(',') if n.strip()]
            except ValueError as e:
                raise ImportRequestError(f"Invalid numbers filter: {args.numbers}") from e
        print_json(analytics.search_results(
            game_name=args.game,
            start_date=_cli_date(args.start),
            end_date=_cli_date(args.end),
            numbers=numbers,
            min_jackpot=args.min_jackpot,
            max_jackpot=args.max_jackpot,
            limit=args.limit,
            offset=args.offset
        ))
    elif args.command == 'summary':
        print_json({
            'games': analytics.get_game_summary(),
            'system': analytics.get_system_statistics(),
        })
    return EXIT_OK


def main(argv=None) -> int:
    """Main application entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_to_file=not args.no_log_file)
    logger.info(f"Running command: {args.command}")

    try:
        return run_command(args)
    except (ImportRequestError, KeyError, ValueError, OSError) as e:
        logger.error(f"Bad request: {e}")
        print_json({'success': False, 'errors': [str(e)]})
        return EXIT_BAD_REQUEST
    except StoreError as e:
        logger.error(f"Store error: {e}")
        print_json({'success': False, 'errors': [str(e)]})
        return EXIT_IMPORT_FAILED


if __name__ == "__main__":
    sys.exit(main())
