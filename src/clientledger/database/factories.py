"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from clientledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks CLIENTLEDGER_DB_PATH
            environment variable, then defaults to ~/.clientledger/clientledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("CLIENTLEDGER_DB_PATH")

    if database_path is None:
        # Default to ~/.clientledger/clientledger.db
        home = Path.home()
        db_dir = home / ".clientledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "clientledger.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(database_url: Optional[str] = None, database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database from a full SQLAlchemy URL, falling back to SQLite.

    Args:
        database_url: SQLAlchemy URL; takes precedence when given
        database_path: SQLite file path used when no URL is given
    """
    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
