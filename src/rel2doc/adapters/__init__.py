"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the SQLAlchemy-backed
``SQLAdapter`` implementation.

Usage:
    from rel2doc.adapters import DatabaseClient, SQLAdapter
"""

from rel2doc.adapters.base import DatabaseClient
from rel2doc.adapters.sql import SQLAdapter

__all__ = [
    "DatabaseClient",
    "SQLAdapter",
]
