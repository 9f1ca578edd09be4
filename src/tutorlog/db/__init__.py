"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for the students and logs tables
- SqliteStore, the Store implementation used by the CLI and web API
"""

from tutorlog.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
