# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================

"""
Database Module
===============

Relational persistence for the license store:
- SQLite (development/testing)
- PostgreSQL (production)

Key Components:
- Adapters: Engine construction and transactional sessions
- Factory: Dynamic adapter instantiation
- Repositories: Guarded conditional updates and queries per aggregate
- Unit of Work: One transaction plus post-commit hooks
"""

from licensestore.database.factory import DatabaseFactory
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter

__all__ = [
    "DatabaseFactory",
    "BaseDatabaseAdapter",
]
