"""
Persistent store for lottery games and draw results

The importer and the analytics engine receive a ResultStore explicitly.
LotteryDataManager keeps everything in SQLite; InMemoryResultStore honors
the same contract with plain dictionaries and is what the tests use.
"""

import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import AppConfig, GameConfig
from schema import StoredGame, StoredResult


class StoreError(Exception):
    """Base class for persistent store failures"""


class DuplicateResultError(StoreError):
    """A result already exists for this game and draw date"""


class StoreUnavailableError(StoreError):
    """The store cannot be reached; callers should abort rather than continue"""


def get_data_manager(db_path: str = None):
    """Factory function returning a shared LotteryDataManager per database path (CLI use)."""
    db_path = db_path or AppConfig.DB_PATH
    if not hasattr(get_data_manager, "_instances"):
        get_data_manager._instances = {}
    if db_path not in get_data_manager._instances:
        get_data_manager._instances[db_path] = LotteryDataManager(db_path)
    return get_data_manager._instances[db_path]


class ResultStore(ABC):
    """Store-access interface: games keyed by name, results unique per (game_id, draw_date)"""

    @abstractmethod
    def seed_games(self, catalog: Iterable[GameConfig]) -> List[StoredGame]:
        """Create or update one game row per catalog entry"""

    @abstractmethod
    def find_game(self, name: str) -> Optional[StoredGame]:
        """Game by name, or None"""

    @abstractmethod
    def list_games(self) -> List[StoredGame]:
        pass

    def count_games(self) -> int:
        return len(self.list_games())

    @abstractmethod
    def find_result(self, game_id: int, draw_date: date) -> Optional[StoredResult]:
        """Result for a game and date, or None when there is none"""

    @abstractmethod
    def create_result(self, game_id: int, draw_date: date, numbers: Sequence[int],
                      jackpot: Optional[float] = None) -> StoredResult:
        """Insert a result row; raises DuplicateResultError on a (game_id, draw_date) clash"""

    @abstractmethod
    def list_results(self, game_id: Optional[int] = None, start_date: Optional[date] = None,
                     end_date: Optional[date] = None, min_jackpot: Optional[float] = None,
                     max_jackpot: Optional[float] = None, ascending: bool = False,
                     limit: Optional[int] = None, offset: int = 0) -> List[StoredResult]:
        """Results ordered by draw date (newest first unless ascending)"""

    @abstractmethod
    def count_results(self, game_id: Optional[int] = None, start_date: Optional[date] = None,
                      end_date: Optional[date] = None, min_jackpot: Optional[float] = None,
                      max_jackpot: Optional[float] = None) -> int:
        pass

    @abstractmethod
    def total_jackpot(self) -> float:
        pass

    @abstractmethod
    def latest_created_at(self) -> Optional[datetime]:
        pass

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def _round_jackpot(jackpot: Optional[float]) -> Optional[float]:
    return None if jackpot is None else round(float(jackpot), 2)


class LotteryDataManager(ResultStore):
    """SQLite-backed result store"""

    def __init__(self, db_path: str = None):
        self.db_path = db_path or AppConfig.DB_PATH
        self.logger = logging.getLogger(__name__)
        self.conn = None
        self._init_storage()

    def _init_storage(self):
        """Open the database and create tables if needed"""
        try:
            directory = os.path.dirname(self.db_path)
            if self.db_path != ':memory:' and directory:
                os.makedirs(directory, exist_ok=True)

            self.conn = sqlite3.connect(self.db_path)
            cursor = self.conn.cursor()
            cursor.execute('PRAGMA foreign_keys = ON')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS lottery_games (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    description TEXT,
                    max_number INTEGER NOT NULL,
                    number_count INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS lottery_results (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    game_id INTEGER NOT NULL REFERENCES lottery_games(id),
                    draw_date TEXT NOT NULL,
                    numbers TEXT NOT NULL,  -- JSON list
                    jackpot REAL,
                    created_at TEXT NOT NULL,
                    UNIQUE (game_id, draw_date)
                )
            ''')
            self.conn.commit()
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"Failed to initialize lottery store at {self.db_path}: {e}")
            raise StoreUnavailableError(f"Cannot open lottery store at {self.db_path}: {e}") from e

    def _execute(self, sql: str, params: Tuple = ()) -> sqlite3.Cursor:
        """Run one statement, translating sqlite errors into store errors"""
        if self.conn is None:
            raise StoreUnavailableError(f"Lottery store at {self.db_path} is closed")
        try:
            cursor = self.conn.cursor()
            cursor.execute(sql, params)
            return cursor
        except sqlite3.IntegrityError as e:
            if 'UNIQUE' in str(e):
                raise DuplicateResultError(str(e)) from e
            raise StoreError(str(e)) from e
        except sqlite3.OperationalError as e:
            raise StoreUnavailableError(str(e)) from e
        except sqlite3.Error as e:
            # bad parameters for one statement (ProgrammingError, InterfaceError)
            raise StoreError(str(e)) from e

    def _commit(self):
        if self.conn is None:
            raise StoreUnavailableError(f"Lottery store at {self.db_path} is closed")
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(str(e)) from e

    @staticmethod
    def _game_from_row(row) -> StoredGame:
        return StoredGame(
            id=row[0],
            name=row[1],
            description=row[2],
            max_number=row[3],
            number_count=row[4],
            created_at=datetime.fromisoformat(row[5]) if row[5] else None
        )

    @staticmethod
    def _result_from_row(row) -> StoredResult:
        return StoredResult(
            id=row[0],
            game_id=row[1],
            game_name=row[2],
            draw_date=date.fromisoformat(row[3]),
            numbers=tuple(json.loads(row[4])),
            jackpot=row[5],
            created_at=datetime.fromisoformat(row[6]) if row[6] else None
        )

    def seed_games(self, catalog: Iterable[GameConfig]) -> List[StoredGame]:
        now = datetime.now().isoformat()
        for game in catalog:
            self._execute('''
                INSERT INTO lottery_games (name, description, max_number, number_count, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    description = excluded.description,
                    max_number = excluded.max_number,
                    number_count = excluded.number_count
            ''', (game.name, game.description, game.max_number, game.number_count, now))
            self.logger.info(f"Created/Updated game: {game.name} - {game.description}")
        self._commit()
        return self.list_games()

    def find_game(self, name: str) -> Optional[StoredGame]:
        row = self._execute(
            'SELECT id, name, description, max_number, number_count, created_at FROM lottery_games WHERE name = ?',
            (name,)
        ).fetchone()
        return self._game_from_row(row) if row else None

    def list_games(self) -> List[StoredGame]:
        rows = self._execute(
            'SELECT id, name, description, max_number, number_count, created_at FROM lottery_games ORDER BY name'
        ).fetchall()
        return [self._game_from_row(row) for row in rows]

    def count_games(self) -> int:
        return self._execute('SELECT COUNT(*) FROM lottery_games').fetchone()[0]

    _RESULT_COLUMNS = '''
        SELECT r.id, r.game_id, g.name, r.draw_date, r.numbers, r.jackpot, r.created_at
        FROM lottery_results r JOIN lottery_games g ON g.id = r.game_id
    '''

    def find_result(self, game_id: int, draw_date: date) -> Optional[StoredResult]:
        row = self._execute(
            self._RESULT_COLUMNS + ' WHERE r.game_id = ? AND r.draw_date = ?',
            (game_id, draw_date.isoformat())
        ).fetchone()
        return self._result_from_row(row) if row else None

    def create_result(self, game_id: int, draw_date: date, numbers: Sequence[int],
                      jackpot: Optional[float] = None) -> StoredResult:
        cursor = self._execute('''
            INSERT INTO lottery_results (game_id, draw_date, numbers, jackpot, created_at)
            VALUES (?, ?, ?, ?, ?)
        ''', (
            game_id,
            draw_date.isoformat(),
            json.dumps([int(n) for n in numbers]),  # Store as JSON string
            _round_jackpot(jackpot),
            datetime.now().isoformat()
        ))
        self._commit()
        row = self._execute(self._RESULT_COLUMNS + ' WHERE r.id = ?', (cursor.lastrowid,)).fetchone()
        return self._result_from_row(row)

    @staticmethod
    def _where(game_id, start_date, end_date, min_jackpot, max_jackpot) -> Tuple[str, List]:
        clauses, params = [], []
        if game_id is not None:
            clauses.append('r.game_id = ?')
            params.append(game_id)
        if start_date is not None:
            clauses.append('r.draw_date >= ?')
            params.append(start_date.isoformat())
        if end_date is not None:
            clauses.append('r.draw_date <= ?')
            params.append(end_date.isoformat())
        if min_jackpot is not None:
            clauses.append('r.jackpot >= ?')
            params.append(min_jackpot)
        if max_jackpot is not None:
            clauses.append('r.jackpot <= ?')
            params.append(max_jackpot)
        return (' WHERE ' + ' AND '.join(clauses)) if clauses else '', params

    def list_results(self, game_id=None, start_date=None, end_date=None, min_jackpot=None,
                     max_jackpot=None, ascending=False, limit=None, offset=0) -> List[StoredResult]:
        where, params = self._where(game_id, start_date, end_date, min_jackpot, max_jackpot)
        direction = 'ASC' if ascending else 'DESC'
        sql = self._RESULT_COLUMNS + where + f' ORDER BY r.draw_date {direction}, r.id {direction} LIMIT ? OFFSET ?'
        params.extend([-1 if limit is None else limit, offset])
        return [self._result_from_row(row) for row in self._execute(sql, tuple(params)).fetchall()]

    def count_results(self, game_id=None, start_date=None, end_date=None, min_jackpot=None,
                      max_jackpot=None) -> int:
        where, params = self._where(game_id, start_date, end_date, min_jackpot, max_jackpot)
        return self._execute('SELECT COUNT(*) FROM lottery_results r' + where, tuple(params)).fetchone()[0]

    def total_jackpot(self) -> float:
        return float(self._execute('SELECT COALESCE(SUM(jackpot), 0) FROM lottery_results').fetchone()[0])

    def latest_created_at(self) -> Optional[datetime]:
        value = self._execute('SELECT MAX(created_at) FROM lottery_results').fetchone()[0]
        return datetime.fromisoformat(value) if value else None

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None


class InMemoryResultStore(ResultStore):
    """Dictionary-backed store with the same contract as LotteryDataManager"""

    def __init__(self, catalog: Optional[Iterable[GameConfig]] = None):
        self._games: Dict[str, StoredGame] = {}
        self._results: Dict[Tuple[int, date], StoredResult] = {}
        self._next_result_id = 1
        if catalog is not None:
            self.seed_games(catalog)

    def seed_games(self, catalog: Iterable[GameConfig]) -> List[StoredGame]:
        for game in catalog:
            existing = self._games.get(game.name)
            self._games[game.name] = StoredGame(
                id=existing.id if existing else len(self._games) + 1,
                name=game.name,
                description=game.description,
                max_number=game.max_number,
                number_count=game.number_count,
                created_at=existing.created_at if existing else datetime.now()
            )
        return self.list_games()

    def find_game(self, name: str) -> Optional[StoredGame]:
        return self._games.get(name)

    def list_games(self) -> List[StoredGame]:
        return sorted(self._games.values(), key=lambda game: game.name)

    def _game_name(self, game_id: int) -> str:
        for game in self._games.values():
            if game.id == game_id:
                return game.name
        raise StoreError(f"Unknown game id: {game_id}")

    def find_result(self, game_id: int, draw_date: date) -> Optional[StoredResult]:
        return self._results.get((game_id, draw_date))

    def create_result(self, game_id: int, draw_date: date, numbers: Sequence[int],
                      jackpot: Optional[float] = None) -> StoredResult:
        key = (game_id, draw_date)
        if key in self._results:
            raise DuplicateResultError(
                f"UNIQUE constraint failed: lottery_results.game_id, lottery_results.draw_date ({game_id}, {draw_date})"
            )
        result = StoredResult(
            id=self._next_result_id,
            game_id=game_id,
            game_name=self._game_name(game_id),
            draw_date=draw_date,
            numbers=tuple(int(n) for n in numbers),
            jackpot=_round_jackpot(jackpot),
            created_at=datetime.now()
        )
        self._next_result_id += 1
        self._results[key] = result
        return result

    def _filtered(self, game_id, start_date, end_date, min_jackpot, max_jackpot) -> List[StoredResult]:
        results = []
        for result in self._results.values():
            if game_id is not None and result.game_id != game_id:
                continue
            if start_date is not None and result.draw_date < start_date:
                continue
            if end_date is not None and result.draw_date > end_date:
                continue
            if min_jackpot is not None and (result.jackpot is None or result.jackpot < min_jackpot):
                continue
            if max_jackpot is not None and (result.jackpot is None or result.jackpot > max_jackpot):
                continue
            results.append(result)
        return results

    def list_results(self, game_id=None, start_date=None, end_date=None, min_jackpot=None,
                     max_jackpot=None, ascending=False, limit=None, offset=0) -> List[StoredResult]:
        results = sorted(
            self._filtered(game_id, start_date, end_date, min_jackpot, max_jackpot),
            key=lambda result: (result.draw_date, result.id),
            reverse=not ascending
        )
        end = None if limit is None else offset + limit
        return results[offset:end]

    def count_results(self, game_id=None, start_date=None, end_date=None, min_jackpot=None,
                      max_jackpot=None) -> int:
        return len(self._filtered(game_id, start_date, end_date, min_jackpot, max_jackpot))

    def total_jackpot(self) -> float:
        return float(sum(result.jackpot or 0 for result in self._results.values()))

    def latest_created_at(self) -> Optional[datetime]:
        stamps = [result.created_at for result in self._results.values() if result.created_at]
        return max(stamps) if stamps else None
