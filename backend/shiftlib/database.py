"""
High-level access to the MedShift SQLite table store.

Three flat tables, string primary keys, no foreign keys:
  shifts            – one row per recorded shift
  monthly_targets   – one row per year-month (id 'YYYY-MM')
  saved_locations   – autocomplete list, independent of shifts.location

Rows travel as JSON-style dicts with camelCase keys; columns are snake_case.
Writes are upserts keyed by id that overwrite exactly the provided columns.
"""
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Tuple

_logger = logging.getLogger(__name__)

# resource -> (table, [(wire_key, column), ...])
_RESOURCES: Dict[str, Tuple[str, List[Tuple[str, str]]]] = {
    'shifts': ('shifts', [
        ('id', 'id'),
        ('date', 'date'),
        ('startTime', 'start_time'),
        ('endTime', 'end_time'),
        ('location', 'location'),
        ('color', 'color'),
        ('specialty', 'specialty'),
        ('shiftType', 'shift_type'),
        ('paymentAmount', 'payment_amount'),
        ('paymentStatus', 'payment_status'),
        ('notes', 'notes'),
    ]),
    'targets': ('monthly_targets', [
        ('id', 'id'),
        ('year', 'year'),
        ('month', 'month'),
        ('expected', 'expected'),
        ('actual', 'actual'),
    ]),
    'locations': ('saved_locations', [
        ('id', 'id'),
        ('name', 'name'),
        ('usageCount', 'usage_count'),
    ]),
}

_SCHEMA = """
CREATE TABLE IF NOT EXISTS shifts (
    id TEXT PRIMARY KEY NOT NULL,
    date TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    location TEXT NOT NULL,
    color TEXT,
    specialty TEXT,
    shift_type TEXT,
    payment_amount REAL,
    payment_status TEXT,
    notes TEXT
);
CREATE TABLE IF NOT EXISTS monthly_targets (
    id TEXT PRIMARY KEY NOT NULL,
    year TEXT NOT NULL,
    month TEXT NOT NULL,
    expected REAL NOT NULL DEFAULT 0,
    actual REAL NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS saved_locations (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    usage_count INTEGER NOT NULL DEFAULT 0
);
"""

# Paths whose schema has already been created in this process
_INITIALIZED: set = set()
_init_lock = threading.Lock()


class ShiftDatabase:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._ensure_schema()

    # ── Connection handling ────────────────────────────────────
    @contextmanager
    def _connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        key = os.path.abspath(self.db_path)
        with _init_lock:
            if key in _INITIALIZED and os.path.exists(self.db_path):
                return
            directory = os.path.dirname(key)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with self._connect() as conn:
                conn.executescript(_SCHEMA)
            _INITIALIZED.add(key)

    @staticmethod
    def _resource(name: str) -> Tuple[str, List[Tuple[str, str]]]:
        try:
            return _RESOURCES[name]
        except KeyError:
            raise ValueError(f"Unknown resource: {name}")

    # ── Generic operations ─────────────────────────────────────
    def list(self, resource: str) -> List[Dict[str, Any]]:
        """Return every row of a resource as wire dicts, in no particular order."""
        table, columns = self._resource(resource)
        cols = ', '.join(col for _, col in columns)
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {cols} FROM {table}").fetchall()
        return [{key: row[col] for key, col in columns} for row in rows]

    def upsert(self, resource: str, items: Any) -> Tuple[int, int]:
        """Insert-or-overwrite one item or a list of items, keyed by id.

        Only the columns present in an item are written on conflict, so a
        partial item leaves the other columns untouched. Each item is applied
        on its own; a failing item is logged and skipped, the rest still
        commit. Returns (saved, failed).
        """
        table, columns = self._resource(resource)
        if not isinstance(items, list):
            items = [items]
        saved = failed = 0
        with self._connect() as conn:
            for item in items:
                try:
                    self._upsert_one(conn, table, columns, item)
                    saved += 1
                except (ValueError, sqlite3.Error) as e:
                    failed += 1
                    _logger.warning("upsert %s skipped item: %s", resource, e)
        if failed:
            _logger.info("upsert %s: %d saved, %d failed", resource, saved, failed)
        return saved, failed

    @staticmethod
    def _upsert_one(conn: sqlite3.Connection, table: str,
                    columns: List[Tuple[str, str]], item: Any) -> None:
        if not isinstance(item, dict):
            raise ValueError(f"item must be an object, got {type(item).__name__}")
        if item.get('id') in (None, ''):
            raise ValueError("item has no id")
        provided = [(key, col) for key, col in columns if key in item]
        updates = [(key, col) for key, col in provided if col != 'id']
        # NOT NULL is checked before ON CONFLICT: update existing rows in place,
        # insert only new ids.
        # A failing statement is rolled back on its own, earlier items stay.
        if updates:
            cur = conn.execute(
                f"UPDATE {table} SET " + ', '.join(f"{col} = ?" for _, col in updates) + " WHERE id = ?",
                [item[key] for key, _ in updates] + [item['id']],
            )
            if cur.rowcount:
                return
        elif conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (item['id'],)).fetchone():
            return
        cols = [col for _, col in provided]
        placeholders = ', '.join('?' for _ in cols)
        conn.execute(
            f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({placeholders}) ON CONFLICT(id) DO NOTHING",
            [item[key] for key, _ in provided],
        )

    def delete(self, resource: str, record_id: str) -> int:
        """Delete a row by id. Absent ids are a no-op. Returns rows removed."""
        table, _ = self._resource(resource)
        with self._connect() as conn:
            cur = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            return cur.rowcount

    def get(self, resource: str, record_id: str) -> Optional[Dict[str, Any]]:
        for row in self.list(resource):
            if row['id'] == record_id:
                return row
        return None

    # ── Shifts ─────────────────────────────────────────────────
    def list_shifts(self) -> List[Dict[str, Any]]:
        return self.list('shifts')

    def upsert_shifts(self, items: Any) -> Tuple[int, int]:
        return self.upsert('shifts', items)

    def delete_shift(self, shift_id: str) -> int:
        return self.delete('shifts', shift_id)

    # ── Monthly targets ────────────────────────────────────────
    def list_targets(self) -> List[Dict[str, Any]]:
        return self.list('targets')

    def upsert_targets(self, items: Any) -> Tuple[int, int]:
        return self.upsert('targets', items)

    # ── Saved locations ────────────────────────────────────────
    def list_locations(self) -> List[Dict[str, Any]]:
        return self.list('locations')

    def upsert_locations(self, items: Any) -> Tuple[int, int]:
        return self.upsert('locations', items)

    def delete_location(self, location_id: str) -> int:
        return self.delete('locations', location_id)

    # ── Stats ──────────────────────────────────────────────────
    def get_stats(self) -> Dict[str, int]:
        stats = {}
        with self._connect() as conn:
            for resource, (table, _) in _RESOURCES.items():
                stats[resource] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        return stats


def resources() -> Iterable[str]:
    return tuple(_RESOURCES)
