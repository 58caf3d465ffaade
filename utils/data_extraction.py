"""
Extraction helpers for raw draw data: number cells and CSV result files
"""
import csv
import logging
import re
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from schema import DrawRecord

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = ['gameName', 'drawDate', 'numbers', 'jackpot']
REQUIRED_COLUMNS = ['gameName', 'drawDate', 'numbers']

_CELL_DECORATION = re.compile(r'[\[\]"]')


def parse_number_cell(raw: str, delimiter: str = ';') -> List[int]:
    """
    Parse a delimited number cell such as "[1;15;22;28;35;42]".
    Brackets and quotes are stripped; tokens that are not integers are dropped.
    """
    numbers = []
    for token in _CELL_DECORATION.sub('', str(raw)).split(delimiter):
        token = token.strip()
        if re.fullmatch(r'[+-]?\d+', token):
            numbers.append(int(token))
    return numbers


def map_csv_headers(headers: Iterable[str]) -> Dict[str, str]:
    """
    Match expected fields to CSV headers, case-insensitively by substring,
    regardless of column order. Spaces, underscores and dashes in headers are
    ignored ("Game Name" matches gameName). The first matching header wins.
    """
    headers = list(headers)
    mapping = {}
    for expected in EXPECTED_COLUMNS:
        for header in headers:
            if expected.lower() in re.sub(r'[\s_\-]', '', str(header)).lower():
                mapping[expected] = header
                break
    return mapping


def split_csv_line(line: str) -> List[str]:
    """
    Fields of one physical CSV line.

    Raises:
        csv.Error: a quoted field is left open or followed by stray text
    """
    return next(csv.reader([line], skipinitialspace=True, strict=True))


def parse_results_csv(content: str) -> Tuple[List[DrawRecord], List[str]]:
    """
    Parse CSV text with a header row into candidate records.

    Every physical line is one row. Rows that cannot be parsed are skipped
    and reported in the returned warnings (numbered by line in the input);
    they never reach the import pipeline.

    Raises:
        ValueError: empty content, unreadable header or a required column is missing
    """
    if not content or not content.strip():
        raise ValueError('CSV content is empty')

    lines = [(number, line) for number, line in enumerate(content.splitlines(), start=1) if line.strip()]
    header_number, header_line = lines[0]
    try:
        headers = [header.strip() for header in split_csv_line(header_line)]
    except csv.Error as e:
        raise ValueError(f"Unreadable CSV header on line {header_number}: {e}") from e

    header_map = map_csv_headers(headers)
    missing = [column for column in REQUIRED_COLUMNS if column not in header_map]
    if missing:
        raise ValueError(f"Missing required CSV columns: {', '.join(missing)}")

    warnings: List[str] = []
    rows, line_numbers = [], []
    for line_number, line in lines[1:]:
        try:
            fields = split_csv_line(line)
        except csv.Error as e:
            warnings.append(f"Skipping invalid row {line_number}: {e}")
            continue
        if len(fields) != len(headers):
            warnings.append(f"Skipping invalid row {line_number}: expected {len(headers)} fields, got {len(fields)}")
            continue
        rows.append(fields)
        line_numbers.append(line_number)

    df = pd.DataFrame(rows, columns=headers, index=line_numbers, dtype=str)

    records: List[DrawRecord] = []
    for line_number, row in df.iterrows():
        cells = {field: str(row[header]).strip() for field, header in header_map.items()}

        empty = [field for field in REQUIRED_COLUMNS if not cells[field]]
        if empty:
            warnings.append(f"Skipping invalid row {line_number}: missing {', '.join(empty)}")
            continue

        try:
            jackpot_cell = cells.get('jackpot', '').replace('"', '').replace(',', '')
            records.append(DrawRecord(
                game_name=cells['gameName'].replace('"', ''),
                draw_date=cells['drawDate'].replace('"', ''),
                numbers=parse_number_cell(cells['numbers']),
                jackpot=float(jackpot_cell) if jackpot_cell else None
            ))
        except ValueError as e:
            warnings.append(f"Skipping invalid row {line_number}: {e}")

    for warning in warnings:
        logger.warning(warning)
    logger.info(f"Parsed {len(records)} candidate records from CSV ({len(warnings)} rows skipped)")
    return records, warnings
