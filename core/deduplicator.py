"""
Duplicate draw detection, keyed by (game name, draw date)
"""

import logging
from collections import OrderedDict
from datetime import date
from typing import List, Optional, Sequence, TypeVar, Union

from core.data_validator import DataValidator
from schema import CleanRecord, DrawKey, DrawRecord

logger = logging.getLogger(__name__)

R = TypeVar('R', CleanRecord, DrawRecord)


def draw_key(record: Union[CleanRecord, DrawRecord]) -> Optional[DrawKey]:
    """Composite key for a record, or None when its name or date is unusable"""
    if isinstance(record, CleanRecord):
        return record.key
    if not isinstance(record.game_name, str):
        return None
    draw_date = DataValidator.parse_draw_date(record.draw_date)
    if draw_date is None:
        return None
    return DrawKey(record.game_name.strip(), draw_date)


def detect_duplicates(records: Sequence[R]) -> List[List[R]]:
    """
    Group records sharing a (game, draw date) key.

    Only groups with more than one member are returned, in order of first
    appearance. Records without a usable key are ignored.
    """
    groups = OrderedDict()
    for record in records:
        key = draw_key(record)
        if key is None:
            continue
        groups.setdefault(key, []).append(record)

    duplicates = [group for group in groups.values() if len(group) > 1]
    if duplicates:
        logger.info(f"Found {len(duplicates)} duplicate draw groups in batch of {len(records)}")
    return duplicates


def is_persisted_duplicate(store, game_id: int, draw_date: date) -> bool:
    """True when the store already holds a result for this game and date"""
    return store.find_result(game_id, draw_date) is not None
