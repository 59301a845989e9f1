import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

from utils.constants import DB_FILE
from utils.errors import ConcurrencyConflict, PersistenceFailure

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_SECONDS = 5.0


def translate_error(exc: sqlite3.Error) -> Exception:
    """Map a sqlite3 error onto the finance error taxonomy."""
    message = str(exc).lower()
    if isinstance(exc, sqlite3.OperationalError) and ("locked" in message or "busy" in message):
        return ConcurrencyConflict(f"Database is busy: {exc}")
    if isinstance(exc, sqlite3.IntegrityError) and "recurring_id" in message:
        return ConcurrencyConflict(f"Recurring entry already materialized: {exc}")
    return PersistenceFailure(str(exc))


class DatabaseManager:
    """Owns the SQLite connections, the schema and the transactional scope.

    Each thread gets its own connection. Connections run in autocommit mode
    and ``transaction()`` opens an explicit ``BEGIN IMMEDIATE`` so that all
    writes inside the block commit or roll back together. Nested
    ``transaction()`` blocks join the outer one.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._registry_lock = threading.Lock()
        self._owner_locks: dict[int, threading.Lock] = {}

    def get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            try:
                conn = sqlite3.connect(
                    self.db_path,
                    timeout=BUSY_TIMEOUT_SECONDS,
                    isolation_level=None,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error as exc:
                raise translate_error(exc) from exc
            self._local.conn = conn
            self._local.depth = 0
            with self._registry_lock:
                self._connections.append(conn)
        return conn

    def initialize(self):
        """Create schema."""
        conn = self.get_connection()
        try:
            self._create_schema(conn)
        except sqlite3.Error as exc:
            raise translate_error(exc) from exc
        logger.debug("Schema ready in %s", self.db_path)

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS recurring_transactions (
                id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id            INTEGER NOT NULL,
                title               TEXT    NOT NULL,
                category            TEXT    NOT NULL,
                amount              TEXT    NOT NULL CHECK(CAST(amount AS REAL) > 0),
                description         TEXT,
                frequency           TEXT    NOT NULL,
                start_date          TEXT    NOT NULL,
                end_date            TEXT,
                last_processed_date TEXT,
                next_due_date       TEXT    NOT NULL,
                is_expense          INTEGER NOT NULL DEFAULT 1,
                is_active           INTEGER NOT NULL DEFAULT 1,
                created_at          TEXT    NOT NULL DEFAULT (datetime('now')),
                updated_at          TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS expenses (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id     INTEGER NOT NULL,
                category     TEXT    NOT NULL,
                amount       TEXT    NOT NULL CHECK(CAST(amount AS REAL) >= 0),
                date         TEXT    NOT NULL,
                description  TEXT    NOT NULL DEFAULT '',
                recurring_id INTEGER REFERENCES recurring_transactions(id) ON DELETE SET NULL,
                created_at   TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS incomes (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id     INTEGER NOT NULL,
                source       TEXT    NOT NULL,
                amount       TEXT    NOT NULL CHECK(CAST(amount AS REAL) >= 0),
                date         TEXT    NOT NULL,
                description  TEXT    NOT NULL DEFAULT '',
                recurring_id INTEGER REFERENCES recurring_transactions(id) ON DELETE SET NULL,
                created_at   TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS budgets (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id     INTEGER NOT NULL,
                category     TEXT    NOT NULL,
                limit_amount TEXT    NOT NULL CHECK(CAST(limit_amount AS REAL) >= 0),
                UNIQUE(owner_id, category)
            );

            CREATE TABLE IF NOT EXISTS savings_goals (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id       INTEGER NOT NULL,
                name           TEXT    NOT NULL,
                target_amount  TEXT    NOT NULL CHECK(CAST(target_amount AS REAL) >= 0),
                current_amount TEXT    NOT NULL DEFAULT '0' CHECK(CAST(current_amount AS REAL) >= 0),
                target_date    TEXT,
                created_at     TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS user_settings (
                owner_id       INTEGER PRIMARY KEY,
                monthly_income TEXT NOT NULL DEFAULT '0',
                spending_limit TEXT NOT NULL DEFAULT '0',
                savings_goal   TEXT NOT NULL DEFAULT '0'
            );

            CREATE INDEX IF NOT EXISTS idx_expenses_owner_date   ON expenses(owner_id, date);
            CREATE INDEX IF NOT EXISTS idx_incomes_owner_date    ON incomes(owner_id, date);
            CREATE INDEX IF NOT EXISTS idx_recurring_owner_due   ON recurring_transactions(owner_id, next_due_date);

            CREATE UNIQUE INDEX IF NOT EXISTS idx_expenses_recurring_date
                ON expenses(recurring_id, date) WHERE recurring_id IS NOT NULL;
            CREATE UNIQUE INDEX IF NOT EXISTS idx_incomes_recurring_date
                ON incomes(recurring_id, date) WHERE recurring_id IS NOT NULL;
        """)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Atomic write scope. sqlite3 errors surface as ConcurrencyConflict/PersistenceFailure."""
        conn = self.get_connection()
        if self._local.depth:
            self._local.depth += 1
            try:
                yield conn
            finally:
                self._local.depth -= 1
            return

        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise translate_error(exc) from exc
        self._local.depth = 1
        try:
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback(conn)
            raise translate_error(exc) from exc
        except BaseException:
            self._rollback(conn)
            raise
        finally:
            self._local.depth = 0

    def _rollback(self, conn: sqlite3.Connection):
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error:
                logger.exception("Rollback failed on %s", self.db_path)

    def fetch_all(self, sql: str, params=()) -> list[sqlite3.Row]:
        try:
            return self.get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise translate_error(exc) from exc

    def fetch_one(self, sql: str, params=()) -> sqlite3.Row | None:
        try:
            return self.get_connection().execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise translate_error(exc) from exc

    def owner_lock(self, owner_id: int) -> threading.Lock:
        """Process-wide lock serializing recurring processing for one owner."""
        with self._registry_lock:
            lock = self._owner_locks.get(owner_id)
            if lock is None:
                lock = self._owner_locks[owner_id] = threading.Lock()
            return lock

    @staticmethod
    def open(db_path: str | None = None) -> "DatabaseManager":
        """Startup factory: open the database at db_path and ensure the schema exists."""
        db = DatabaseManager(db_path)
        db.initialize()
        return db

    def close(self):
        with self._registry_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()
