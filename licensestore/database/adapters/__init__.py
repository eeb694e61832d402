# ==============================================================================
# DATABASE ADAPTERS PACKAGE
# ==============================================================================

"""
Database Adapters
=================

Provides unified interface implementations for different databases:
- BaseDatabaseAdapter: Abstract interface definition
- PostgreSQLAdapter: PostgreSQL using SQLAlchemy async
- SQLiteAdapter: SQLite using aiosqlite
"""

from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.database.adapters.postgresql_adapter import PostgreSQLAdapter
from licensestore.database.adapters.sqlite_adapter import SQLiteAdapter

__all__ = [
    "BaseDatabaseAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
]
