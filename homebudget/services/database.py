"""Database service for SQLite operations."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional

from aws_lambda_powertools import Logger

logger = Logger(service="homebudget-database")

_db_connection: Optional[sqlite3.Connection] = None
_db_path: Optional[str] = None

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS category_types (
    id INTEGER PRIMARY KEY,
    description TEXT
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY,
    description TEXT UNIQUE,
    type_id INTEGER REFERENCES category_types(id)
);

CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY,
    date TEXT,
    amount REAL,
    description TEXT,
    category_id INTEGER REFERENCES categories(id)
);

CREATE INDEX IF NOT EXISTS ix_expenses_date ON expenses (date);
"""

# (description, type id) in id order; type ids follow CategoryType
DEFAULT_CATEGORIES = [
    ('Utilities', 2),
    ('Rent', 2),
    ('Food', 2),
    ('Entertainment', 2),
    ('Education', 2),
    ('Miscellaneous', 2),
    ('Medical Expenses', 2),
    ('Vacation', 2),
    ('Credit Card', 3),
    ('Clothes', 2),
    ('Gifts', 2),
    ('Insurance', 2),
    ('Transportation', 2),
    ('Eating Out', 2),
    ('Savings', 4),
    ('Income', 1),
]

CATEGORY_TYPES = [(1, 'Income'), (2, 'Expense'), (3, 'Credit'), (4, 'Savings')]


class StoreUnavailable(Exception):
    """The budget database is not open or its connection was closed."""


def verify_read_from_file(path: str) -> None:
    """Check that a database file exists.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f'Database file ({path}) does not exist')


def verify_write_to_file(path: str) -> None:
    """Check that a database file can be written.

    Raises:
        FileNotFoundError: if the parent directory does not exist
        PermissionError: if the file exists and is read-only
    """
    folder = Path(path).resolve().parent
    if not folder.is_dir():
        raise FileNotFoundError(f'Directory for database file ({path}) does not exist')

    if os.path.exists(path) and not os.access(path, os.W_OK):
        raise PermissionError(f'Database file ({path}) is read only')


def init_db(conn: sqlite3.Connection) -> None:
    """Create schema and seed data in a fresh database.

    Args:
        conn: SQLite connection
    """
    conn.executescript(SCHEMA_SQL)
    conn.executemany(
        "INSERT OR IGNORE INTO category_types (id, description) VALUES (?, ?)",
        CATEGORY_TYPES
    )
    seed_default_categories(conn)
    conn.commit()


@contextmanager
def _closed_as_unavailable() -> Generator[None, None, None]:
    try:
        yield
    except sqlite3.ProgrammingError as e:
        if 'closed' in str(e).lower():
            raise StoreUnavailable('Database connection is closed') from e
        raise


def seed_default_categories(conn: sqlite3.Connection) -> None:
    """Replace all categories with the default set.

    Args:
        conn: SQLite connection

    Raises:
        StoreUnavailable: if the connection was closed
    """
    with _closed_as_unavailable():
        conn.execute("DELETE FROM categories")
        conn.executemany(
            "INSERT INTO categories (description, type_id) VALUES (?, ?)",
            DEFAULT_CATEGORIES
        )


def _connect(path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def open_database(path: str, new_db: bool = False) -> sqlite3.Connection:
    """Open a budget database, creating a new one if needed.

    An existing file is opened unless new_db is set, in which case it is
    replaced with an empty database holding the default categories.

    Args:
        path: Database file path
        new_db: Start from a fresh database

    Returns:
        SQLite connection with row factory set
    """
    global _db_connection, _db_path

    close_db()

    if not new_db and os.path.exists(path):
        verify_read_from_file(path)
        verify_write_to_file(path)
        _db_connection = _connect(path)
        logger.info("Opened existing database", extra={"path": path})
    else:
        verify_write_to_file(path)
        if os.path.exists(path):
            os.remove(path)
        _db_connection = _connect(path)
        init_db(_db_connection)
        logger.info("Created new database", extra={"path": path})

    _db_path = path
    return _db_connection


def get_connection() -> sqlite3.Connection:
    """Get the open database connection.

    Returns:
        SQLite connection

    Raises:
        StoreUnavailable: if no database is open
    """
    if _db_connection is None:
        raise StoreUnavailable('Database is not open')
    return _db_connection


def get_db_path() -> Optional[str]:
    """Path of the open database, or None."""
    return _db_path


def is_open() -> bool:
    return _db_connection is not None


def close_db() -> None:
    """Close database connection."""
    global _db_connection, _db_path

    if _db_connection is not None:
        _db_connection.close()
        _db_connection = None
        _db_path = None


@contextmanager
def transaction() -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database transactions.

    Yields:
        SQLite connection

    Commits on success, rolls back on exception. A closed connection
    raises StoreUnavailable without a rollback.
    """
    conn = get_connection()
    try:
        yield conn
        with _closed_as_unavailable():
            conn.commit()
    except StoreUnavailable:
        raise
    except Exception:
        conn.rollback()
        raise


def execute(sql: str, params: tuple = ()) -> sqlite3.Cursor:
    """Execute SQL and return cursor.

    Args:
        sql: SQL statement
        params: Query parameters

    Returns:
        Cursor with results

    Raises:
        StoreUnavailable: if the connection is missing or was closed
    """
    conn = get_connection()
    with _closed_as_unavailable():
        return conn.execute(sql, params)


def fetch_one(sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
    """Fetch a single row.

    Args:
        sql: SQL query
        params: Query parameters

    Returns:
        Row or None
    """
    cursor = execute(sql, params)
    return cursor.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> List[sqlite3.Row]:
    """Fetch all rows.

    Args:
        sql: SQL query
        params: Query parameters

    Returns:
        List of rows
    """
    cursor = execute(sql, params)
    return cursor.fetchall()


def fetch_scalar(sql: str, params: tuple = ()) -> Any:
    """Fetch the first column of the first row, or None."""
    row = fetch_one(sql, params)
    return row[0] if row else None


def last_insert_id() -> int:
    """Id of the row most recently inserted on this connection."""
    return execute("SELECT last_insert_rowid()").fetchone()[0]
