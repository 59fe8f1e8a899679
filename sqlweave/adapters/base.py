"""
Adapter interface: the operations sqlweave needs from a database connector.

Concrete adapters implement ``quote``, ``run``, ``fetch_rows`` and ``fetch_count``.
``fetch_first_row``, ``fetch_first_column``, ``fetch_first_field`` and
``fetch_each_row`` have default implementations built on ``fetch_rows`` which
adapters may override for efficiency.

All execution methods raise ``DatabaseError`` (wrapping the driver's exception) on
invalid SQL or connection failure.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, nullcontext
from typing import Any

Row = dict[str, Any]
RowCallback = Callable[[Row], Any]


class Adapter(ABC):
    """Abstract base class for sqlweave database adapters."""

    # ------------------------------------------------------------------
    # Interface methods
    # ------------------------------------------------------------------

    @abstractmethod
    def quote(self, value: Any) -> str:
        """
        Convert *value* into a SQL literal that can be embedded in a statement.

        Examples::

            quote("It's quoted")  # "'It''s quoted'"
            quote(1.23)           # "1.23"
            quote(None)           # "NULL"
            quote(date(2020, 1, 1))  # "'2020-01-01'"

        Raises:
            SerializationError: *value* has no literal form for this backend.
        """

    @abstractmethod
    def run(self, sql: str) -> None:
        """Execute *sql*, discarding any result."""

    @abstractmethod
    def fetch_rows(self, sql: str) -> list[Row]:
        """Execute *sql* and return every row as a ``{column: value}`` dict."""

    @abstractmethod
    def fetch_count(self, sql: str) -> int:
        """
        Execute *sql* and return the number of rows affected (INSERT/UPDATE/DELETE)
        or returned (statements that produce rows).
        """

    # ------------------------------------------------------------------
    # Predefined methods
    # ------------------------------------------------------------------

    def fetch_first_row(self, sql: str) -> Row | None:
        """First row of the result, or ``None`` when there are no rows."""
        rows = self.fetch_rows(sql)
        return rows[0] if rows else None

    def fetch_first_column(self, sql: str) -> list[Any]:
        """First value of every row (``None`` for rows without columns)."""
        return [next(iter(row.values()), None) for row in self.fetch_rows(sql)]

    def fetch_first_field(self, sql: str) -> Any:
        """First value of the first row, or ``None``."""
        row = self.fetch_first_row(sql)
        if not row:
            return None
        return next(iter(row.values()))

    def fetch_each_row(self, sql: str, callback: RowCallback | None = None) -> Iterator[Row] | None:
        """
        Execute *sql* and pass each row to *callback*.

        Without a callback, return an iterator over the rows instead. Adapters that
        stream return a single-pass iterator holding a connection until it is
        exhausted or closed; use it with ``contextlib.closing`` when breaking early.
        """
        rows = self._iter_rows(sql)
        if callback is None:
            return rows
        for row in rows:
            callback(row)
        return None

    def _iter_rows(self, sql: str) -> Iterator[Row]:
        return iter(self.fetch_rows(sql))

    def session(self) -> AbstractContextManager[Any]:
        """
        Context in which every statement from the current thread / task runs on the same
        connection. The transaction helper enters it so that start, body and commit or
        rollback share a connection. Adapters without pooling need not override this.
        """
        return nullcontext()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
