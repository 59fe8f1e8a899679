"""
PostgreSQL adapter (psycopg 3).

Literals for the common types follow ``quote_literal``; other values psycopg knows how
to adapt (bytes, ranges, ip addresses, ...) are rendered with ``psycopg.sql.Literal``.
``fetch_each_row`` streams rows in single-row mode instead of buffering the result.
"""

from collections.abc import Iterator
from typing import Any

import psycopg
from psycopg import sql as pgsql
from psycopg.rows import dict_row

from sqlweave.core.errors import SerializationError
from sqlweave.core.pool import ConnectionPool, DataSource, ProductTypeEnum
from sqlweave.engines.sql.literals import quote_literal

from .base import Row
from .dbapi import DBAPIAdapter


class PostgresAdapter(DBAPIAdapter):
    """
    Example::

        adapter = PostgresAdapter.from_datasource(
            DataSource(product_type="postgres", host="localhost", database="app",
                       username="app", password="secret")
        )
    """

    backend = "postgres"
    product_type = ProductTypeEnum.POSTGRES

    def __init__(self, pool: ConnectionPool) -> None:
        super().__init__(pool, errors=(psycopg.Error,))

    @classmethod
    def from_datasource(cls, datasource: DataSource, **pool_kwargs: Any) -> "PostgresAdapter":
        return cls(ConnectionPool.for_datasource(datasource, **pool_kwargs))

    def quote(self, value: Any) -> str:
        try:
            return quote_literal(value)
        except SerializationError:
            pass
        with self._driver_errors(), self.pool.connection() as conn:
            try:
                return pgsql.Literal(value).as_string(conn)
            except psycopg.Error as e:
                raise SerializationError(value, str(e)) from e

    def _iter_rows(self, sql: str) -> Iterator[Row]:
        return self._stream(sql)

    def _stream(self, sql: str) -> Iterator[Row]:
        # Errors surface on first iteration; the connection is held until the
        # generator is exhausted or closed.
        with self._driver_errors(), self.pool.connection() as conn:
            cur = conn.cursor(row_factory=dict_row)
            try:
                yield from cur.stream(sql)
            finally:
                cur.close()
