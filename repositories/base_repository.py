"""
Shared SQLite plumbing for repositories.
"""

import logging
import sqlite3
from contextlib import contextmanager

from infrastructure.schema_manager import SchemaManager

logger = logging.getLogger("war_tracker.repositories")


class BaseRepository:
    """
    Opens a connection per operation; commits on success, rolls back on error.

    The schema is created on construction so each repository can be used on
    its own against a fresh database file.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        SchemaManager(db_path).initialize()

    @contextmanager
    def connection(self):
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
