"""
Generic DB-API 2 adapter over a ``ConnectionPool``.

Each statement checks out a connection, runs on a fresh cursor and releases the
connection again, unless the caller is inside ``session()`` (the transaction helper),
in which case all statements share the pinned connection.
"""

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import Any

from sqlweave.core.config import settings
from sqlweave.core.errors import DatabaseError
from sqlweave.core.pool import ConnectionPool, ProductTypeEnum, cursor_to_dicts, execute
from sqlweave.engines.sql.literals import quote_literal

from .base import Adapter, Row

_log = logging.getLogger(__name__)


class DBAPIAdapter(Adapter):
    """
    Adapter for any DB-API 2 driver.

    - pool: ConnectionPool producing the driver's connections.
    - errors: driver exception classes translated into ``DatabaseError``
      (usually ``(driver.Error,)``). Other exceptions propagate unchanged.
    """

    backend = "database"
    product_type: ProductTypeEnum | None = None

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        errors: tuple[type[BaseException], ...] = (),
    ) -> None:
        self.pool = pool
        self.errors = errors

    def quote(self, value: Any) -> str:
        return quote_literal(value)

    def run(self, sql: str) -> None:
        with self._cursor(sql):
            pass

    def fetch_rows(self, sql: str) -> list[Row]:
        with self._cursor(sql) as cur:
            return cursor_to_dicts(cur)

    def fetch_count(self, sql: str) -> int:
        with self._cursor(sql) as cur:
            return self._count(cur)

    @contextmanager
    def session(self) -> Iterator[Any]:
        with ExitStack() as stack:
            with self._driver_errors():
                conn = stack.enter_context(self.pool.pinned())
            yield conn

    def _count(self, cur: Any) -> int:
        if cur.description is not None:
            return len(cur.fetchall())
        return max(cur.rowcount or 0, 0)

    @contextmanager
    def _driver_errors(self) -> Iterator[None]:
        """Translate the driver's exceptions (connect, execute, fetch) into ``DatabaseError``."""
        try:
            yield
        except self.errors as e:
            if isinstance(e, DatabaseError):
                raise
            raise DatabaseError.wrap(e, self.backend) from e

    @contextmanager
    def _cursor(self, sql: str, *, cursor_factory: Any = None) -> Iterator[Any]:
        """Execute *sql* on a pooled connection and yield the cursor."""
        if settings.LOG_SQL:
            _log.debug("%s: %s", self.backend, sql)
        with self._driver_errors(), self.pool.connection() as conn:
            cur = None
            try:
                cursor = cursor_factory(conn) if cursor_factory is not None else None
                cur = execute(conn, sql, product_type=self.product_type, cursor=cursor)
                yield cur
            finally:
                if cur is not None:
                    try:
                        cur.close()
                    except Exception:
                        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.pool.name}>"
