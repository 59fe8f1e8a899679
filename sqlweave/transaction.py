"""
Transaction helper: wrap work in start / commit statements, rolling back on error.

Uses the SQL-standard transaction statements by default; database specific statements
(isolation levels, savepoints) can be supplied instead::

    # Either both inserts are committed or neither is.
    transaction(lambda tx: (insert_order.run(), insert_items.run()))

    # Request a rollback from the body.
    def body(tx):
        do_thing1()
        if not do_thing2():
            tx.rollback()
            return
        do_thing3()

    transaction(body)

    # Nested work with a savepoint.
    with Transaction():
        do_thing1()
        with Transaction(start="SAVEPOINT s1", commit="RELEASE SAVEPOINT s1",
                         rollback="ROLLBACK TO SAVEPOINT s1"):
            do_thing2()

A body that returns ``ROLLBACK`` (or calls ``tx.rollback()``) is rolled back and
``ROLLBACK`` is returned. Any exception raised by the body rolls back the transaction
and is re-raised unchanged.
"""

import enum
import logging
from collections.abc import Callable
from contextlib import ExitStack
from types import TracebackType
from typing import TypeVar

from sqlweave.adapters.base import Adapter
from sqlweave.core.context import get_adapter
from sqlweave.core.errors import TransactionError

_log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_START = "START TRANSACTION"
DEFAULT_COMMIT = "COMMIT"
DEFAULT_ROLLBACK = "ROLLBACK"


class _Rollback:
    """Sentinel returned by (or from) a rolled back transaction body."""

    def __repr__(self) -> str:
        return "ROLLBACK"


ROLLBACK = _Rollback()


class TransactionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """One transaction on one adapter. Usable once, as a context manager or via ``execute()``."""

    def __init__(
        self,
        adapter: Adapter | None = None,
        *,
        start: str = DEFAULT_START,
        commit: str = DEFAULT_COMMIT,
        rollback: str = DEFAULT_ROLLBACK,
    ) -> None:
        self.adapter = adapter if adapter is not None else get_adapter()
        self.start_sql = start
        self.commit_sql = commit
        self.rollback_sql = rollback
        self.state = TransactionState.NOT_STARTED
        self._rollback_requested = False
        self._session = ExitStack()

    @property
    def rollback_requested(self) -> bool:
        return self._rollback_requested

    def rollback(self) -> None:
        """Request a rollback: the transaction is rolled back when the body finishes.

        Raises:
            TransactionError: the transaction is not in progress.
        """
        if self.state is not TransactionState.STARTED:
            raise TransactionError("not in a transaction, can't rollback")
        self._rollback_requested = True

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def begin(self) -> None:
        if self.state is not TransactionState.NOT_STARTED:
            raise TransactionError(f"transaction already {self.state.value}")
        self._session.enter_context(self.adapter.session())
        try:
            self.adapter.run(self.start_sql)
        except BaseException:
            self._session.close()
            raise
        self.state = TransactionState.STARTED

    def finish(self, *, error: BaseException | None = None) -> None:
        """Commit, or roll back when a rollback was requested or *error* is given.

        A failed commit is followed by the rollback statement and then re-raised.
        """
        try:
            if error is not None or self._rollback_requested:
                self._run_rollback(error)
            else:
                try:
                    self.adapter.run(self.commit_sql)
                except Exception as e:
                    self._run_rollback(e)
                    raise
                self.state = TransactionState.COMMITTED
        finally:
            self._session.close()

    def _run_rollback(self, error: BaseException | None) -> None:
        if error is None:
            _log.info("Rolling back transaction on request")
            self.adapter.run(self.rollback_sql)
        else:
            _log.info("Rolling back transaction due to %s", type(error).__name__)
            try:
                self.adapter.run(self.rollback_sql)
            except Exception:
                # The body's error is the one the caller needs to see
                _log.error("Rollback failed", exc_info=True)
        self.state = TransactionState.ROLLED_BACK

    # ------------------------------------------------------------------
    # Running a body
    # ------------------------------------------------------------------

    def execute(self, body: Callable[["Transaction"], T]) -> T | _Rollback:
        self.begin()
        try:
            result = body(self)
        except BaseException as e:
            self.finish(error=e)
            raise
        if result is ROLLBACK:
            self._rollback_requested = True
        self.finish()
        return ROLLBACK if self._rollback_requested else result

    def __enter__(self) -> "Transaction":
        self.begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.finish(error=exc)

    def __repr__(self) -> str:
        return f"<Transaction {self.state.value}>"


def transaction(
    body: Callable[[Transaction], T],
    *,
    adapter: Adapter | None = None,
    start: str = DEFAULT_START,
    commit: str = DEFAULT_COMMIT,
    rollback: str = DEFAULT_ROLLBACK,
) -> T | _Rollback:
    """Run ``body(tx)`` inside a transaction and return its result (or ``ROLLBACK``)."""
    tx = Transaction(adapter, start=start, commit=commit, rollback=rollback)
    return tx.execute(body)
