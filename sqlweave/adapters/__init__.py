"""
Database adapters: the ``Adapter`` interface and its backend implementations.
"""

from .base import Adapter, Row
from .dbapi import DBAPIAdapter
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlalchemy_adapter import SQLAlchemyAdapter
from .trino import TrinoAdapter

__all__ = [
    "Adapter",
    "Row",
    "DBAPIAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "TrinoAdapter",
    "SQLAlchemyAdapter",
]
