"""
sqlweave: plain SQL templates with safely quoted parameters.

    from sqlweave import sql, set_default_adapter
    from sqlweave.adapters import SQLAlchemyAdapter

    set_default_adapter(SQLAlchemyAdapter.from_url("sqlite:///app.db"))
    sql("SELECT * FROM users WHERE id IN %{(ids)}", {"ids": [1, 2, 3]}).rows()
"""

from sqlweave.adapters.base import Adapter
from sqlweave.core.context import get_adapter, set_default_adapter, use_adapter
from sqlweave.core.errors import (
    ConfigurationError,
    DatabaseError,
    MissingParameterError,
    SerializationError,
    SqlweaveError,
    TemplateError,
    TemplateSyntaxError,
    TransactionError,
)
from sqlweave.engines.sql import parse_parameters
from sqlweave.loader import load_sql
from sqlweave.statement import Statement, run, sql
from sqlweave.transaction import ROLLBACK, Transaction, transaction

__version__ = "0.6.0"

__all__ = [
    "Adapter",
    "Statement",
    "Transaction",
    "ROLLBACK",
    "sql",
    "run",
    "load_sql",
    "transaction",
    "parse_parameters",
    "get_adapter",
    "set_default_adapter",
    "use_adapter",
    "SqlweaveError",
    "TemplateError",
    "TemplateSyntaxError",
    "MissingParameterError",
    "SerializationError",
    "DatabaseError",
    "ConfigurationError",
    "TransactionError",
]
