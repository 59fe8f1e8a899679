"""
Trino adapter (trino DB-API client).

Trino does not coerce strings to temporal or numeric types, so dates, timestamps,
decimals, UUIDs and JSON are rendered as typed literals (``DATE '2021-01-01'``).
Connections run in autocommit mode and are not rolled back on release.
"""

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from trino import exceptions as trino_exceptions

from sqlweave.core.pool import ConnectionPool, DataSource, ProductTypeEnum
from sqlweave.engines.sql.literals import quote_literal, sql_json, sql_number, sql_row, sql_string

from .dbapi import DBAPIAdapter


class TrinoAdapter(DBAPIAdapter):
    backend = "trino"
    product_type = ProductTypeEnum.TRINO

    def __init__(self, pool: ConnectionPool) -> None:
        super().__init__(
            pool,
            errors=(trino_exceptions.Error, trino_exceptions.TrinoQueryError, trino_exceptions.HttpError),
        )

    @classmethod
    def from_datasource(cls, datasource: DataSource, **pool_kwargs: Any) -> "TrinoAdapter":
        pool_kwargs.setdefault("reset_on_release", False)
        return cls(ConnectionPool.for_datasource(datasource, **pool_kwargs))

    def quote(self, value: Any) -> str:
        if isinstance(value, datetime):
            return "TIMESTAMP " + sql_string(value.isoformat(sep=" "))
        if isinstance(value, date):
            return "DATE " + sql_string(value.isoformat())
        if isinstance(value, time):
            return "TIME " + sql_string(value.isoformat())
        if isinstance(value, Decimal):
            return "DECIMAL " + sql_string(sql_number(value))
        if isinstance(value, uuid.UUID):
            return "UUID " + sql_string(str(value))
        if isinstance(value, dict):
            return "JSON " + sql_json(value)
        if isinstance(value, (list, tuple)):
            return sql_row(value, self.quote)
        return quote_literal(value)

    def _count(self, cur: Any) -> int:
        # DML returns a single "rows" column; the affected count is in update_count
        rows = cur.fetchall() if cur.description is not None else []
        if getattr(cur, "update_type", None):
            if cur.rowcount is not None and cur.rowcount >= 0:
                return cur.rowcount
            return int(rows[0][0]) if rows else 0
        return len(rows)
