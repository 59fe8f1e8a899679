"""
Adapter for any database SQLAlchemy can connect to.

Statements are sent as driver SQL (``exec_driver_sql``) on AUTOCOMMIT connections, so
transaction control is entirely up to the SQL you run (see ``sqlweave.transaction``).
"""

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine, Result
from sqlalchemy.exc import SQLAlchemyError

from sqlweave.core.config import settings
from sqlweave.core.errors import DatabaseError
from sqlweave.engines.sql.literals import json_text, quote_literal, sql_row

from .base import Adapter, Row

_log = logging.getLogger(__name__)

_EXEC_OPTIONS = {"no_parameters": True}
_STREAM_OPTIONS = {"no_parameters": True, "stream_results": True}


class SQLAlchemyAdapter(Adapter):
    """
    Example::

        adapter = SQLAlchemyAdapter.from_url("sqlite:///app.db")
        adapter = SQLAlchemyAdapter(existing_engine)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine.execution_options(isolation_level="AUTOCOMMIT")
        self.backend = engine.dialect.name
        native_bool = engine.dialect.supports_native_boolean
        self._true, self._false = ("TRUE", "FALSE") if native_bool else ("1", "0")
        # MySQL treats backslash as an escape character inside string literals
        self._escape_backslash = engine.dialect.name in ("mysql", "mariadb")
        self._pinned: contextvars.ContextVar[Connection | None] = contextvars.ContextVar(
            f"sqlweave_sqlalchemy_{id(self)}", default=None
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "SQLAlchemyAdapter":
        return cls(create_engine(url, **engine_kwargs))

    def quote(self, value: Any) -> str:
        if isinstance(value, dict):
            return self.quote(json_text(value))
        if isinstance(value, str) and self._escape_backslash:
            value = value.replace("\\", "\\\\")
        if isinstance(value, (list, tuple)):
            return sql_row(value, self.quote)
        return quote_literal(value, true=self._true, false=self._false)

    def run(self, sql: str) -> None:
        with self._execute(sql):
            pass

    def fetch_rows(self, sql: str) -> list[Row]:
        with self._execute(sql) as result:
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def fetch_count(self, sql: str) -> int:
        with self._execute(sql) as result:
            if result.returns_rows:
                return len(result.fetchall())
            return max(result.rowcount, 0)

    def _iter_rows(self, sql: str) -> Iterator[Row]:
        return self._stream(sql)

    def _stream(self, sql: str) -> Iterator[Row]:
        with self._execute(sql, options=_STREAM_OPTIONS) as result:
            if not result.returns_rows:
                return
            for row in result.mappings():
                yield dict(row)

    @contextmanager
    def session(self) -> Iterator[Connection]:
        pinned = self._pinned.get()
        if pinned is not None:
            yield pinned
            return
        with self._connect() as conn:
            token = self._pinned.set(conn)
            try:
                yield conn
            finally:
                self._pinned.reset(token)

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        pinned = self._pinned.get()
        if pinned is not None:
            yield pinned
            return
        with self._connect() as conn:
            yield conn

    def _connect(self) -> Connection:
        try:
            return self.engine.connect()
        except SQLAlchemyError as e:
            raise self._wrap(e) from e

    def _wrap(self, e: SQLAlchemyError) -> DatabaseError:
        return DatabaseError.wrap(getattr(e, "orig", None) or e, self.backend)

    @contextmanager
    def _execute(self, sql: str, *, options: dict[str, Any] = _EXEC_OPTIONS) -> Iterator[Result]:
        if settings.LOG_SQL:
            _log.debug("%s: %s", self.backend, sql)
        with self._connection() as conn:
            try:
                result = conn.exec_driver_sql(sql, execution_options=options)
                try:
                    yield result
                finally:
                    result.close()
            except SQLAlchemyError as e:
                raise self._wrap(e) from e

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.engine.url!r}>"
