"""
MySQL / MariaDB adapter (pymysql).

Strings are escaped by the connection (``Connection.escape_string``), which honours
the server's ``NO_BACKSLASH_ESCAPES`` mode: backslashes are escaped unless that mode
is on, in which case only quotes are doubled. Dicts are sent as JSON text through the
same escaping.
"""

from collections.abc import Iterator
from typing import Any

import pymysql
import pymysql.cursors

from sqlweave.core.pool import ConnectionPool, DataSource, ProductTypeEnum, execute
from sqlweave.engines.sql.literals import json_text, quote_literal, sql_row

from .base import Row
from .dbapi import DBAPIAdapter


class MySQLAdapter(DBAPIAdapter):
    backend = "mysql"
    product_type = ProductTypeEnum.MYSQL

    def __init__(self, pool: ConnectionPool) -> None:
        super().__init__(pool, errors=(pymysql.err.Error,))

    @classmethod
    def from_datasource(cls, datasource: DataSource, **pool_kwargs: Any) -> "MySQLAdapter":
        return cls(ConnectionPool.for_datasource(datasource, **pool_kwargs))

    def quote(self, value: Any) -> str:
        if isinstance(value, dict):
            return self.quote(json_text(value))
        if isinstance(value, str):
            with self._driver_errors(), self.pool.connection() as conn:
                return "'" + conn.escape_string(value) + "'"
        if isinstance(value, (list, tuple)):
            return sql_row(value, self.quote)
        return quote_literal(value)

    def _iter_rows(self, sql: str) -> Iterator[Row]:
        return self._stream(sql)

    def _stream(self, sql: str) -> Iterator[Row]:
        # Unbuffered cursor: the connection can't run other statements until the
        # generator is exhausted or closed.
        with self._driver_errors(), self.pool.connection() as conn:
            cur = conn.cursor(pymysql.cursors.SSDictCursor)
            try:
                execute(conn, sql, product_type=self.product_type, cursor=cur)
                yield from cur
            finally:
                cur.close()
