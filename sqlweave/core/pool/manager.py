"""
Connection pool for a single DB-API data source.

Reuses connections to avoid open/close on every statement. Includes a ping on
checkout, max-age eviction, and connection pinning so that every statement issued
inside ``pinned()`` (e.g. a transaction) runs on the same connection.
"""

import contextvars
import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import closing, contextmanager
from typing import Any, NamedTuple

from sqlweave.core.config import settings

from .connect import connect as open_connection
from .models import DataSource

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float   # time.monotonic() when last returned to pool


class ConnectionPool:
    """Idle-connection pool with a ping on checkout, max-age and per-context pinning.

    - connect: zero-argument factory returning a new DB-API connection.
    - size: maximum number of idle connections kept (``settings.DB_POOL_SIZE``).
    - max_age: seconds after which a connection is closed instead of reused.
    - reset_on_release: call ``conn.rollback()`` before returning a connection to the pool.
    """

    def __init__(
        self,
        connect: Callable[[], Any],
        *,
        size: int | None = None,
        max_age: float | None = None,
        reset_on_release: bool = True,
        name: str = "pool",
    ) -> None:
        self._connect = connect
        self._idle: list[_PoolEntry] = []
        self._created: dict[int, float] = {}
        self._lock = threading.Lock()
        self._size = settings.DB_POOL_SIZE if size is None else size
        self._max_age = settings.DB_POOL_MAX_AGE_SEC if max_age is None else max_age
        self._reset_on_release = reset_on_release
        self._pinned: contextvars.ContextVar[Any] = contextvars.ContextVar(
            f"sqlweave_pinned_{id(self)}", default=None
        )
        self.name = name

    @classmethod
    def for_datasource(cls, datasource: DataSource, **kwargs: Any) -> "ConnectionPool":
        kwargs.setdefault("name", datasource.key)
        return cls(lambda: open_connection(datasource), **kwargs)

    def get_connection(self) -> Any:
        """Get a healthy connection (from the pool or freshly opened)."""
        now = time.monotonic()
        while True:
            entry = self._pop()
            if entry is None:
                break
            if self._is_expired(entry):
                _log.debug("Closing expired connection from %s", self.name)
                self._discard(entry.conn)
                continue
            idle_sec = now - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not self.ping(entry.conn):
                _log.warning("Discarding broken connection from %s", self.name)
                self._discard(entry.conn)
                continue
            return entry.conn

        conn = self._connect()
        with self._lock:
            self._created[id(conn)] = time.monotonic()
        return conn

    def release(self, conn: Any) -> None:
        """Return a connection to the pool (or close it if the pool is full)."""
        if self._reset_on_release:
            try:
                conn.rollback()
            except Exception:
                self._discard(conn)
                return

        with self._lock:
            created_at = self._created.get(id(conn), time.monotonic())
            if len(self._idle) < self._size:
                self._idle.append(_PoolEntry(conn=conn, created_at=created_at, last_used=time.monotonic()))
                return

        self._discard(conn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Check out a connection for the duration of the block.

        Inside ``pinned()`` the pinned connection is yielded and not released.
        """
        pinned = self._pinned.get()
        if pinned is not None:
            yield pinned
            return
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.release(conn)

    @contextmanager
    def pinned(self) -> Iterator[Any]:
        """Pin one connection to the current thread / task for the duration of the block."""
        if self._pinned.get() is not None:
            yield self._pinned.get()
            return
        conn = self.get_connection()
        token = self._pinned.set(conn)
        try:
            yield conn
        finally:
            self._pinned.reset(token)
            self.release(conn)

    def ping(self, conn: Any) -> bool:
        """Run ``SELECT 1`` on *conn*; False when the connection is no longer usable."""
        try:
            with closing(conn.cursor()) as cur:
                cur.execute("SELECT 1")
                cur.fetchone()
        except Exception as e:
            _log.debug("Ping failed on %s: %s", self.name, e)
            return False
        return True

    def dispose(self) -> None:
        """Close all idle connections."""
        with self._lock:
            entries = list(self._idle)
            self._idle.clear()
        for e in entries:
            self._discard(e.conn)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "idle_connections": len(self._idle),
                "open_connections": len(self._created),
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pop(self) -> _PoolEntry | None:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return None

    def _is_expired(self, entry: _PoolEntry) -> bool:
        return (time.monotonic() - entry.created_at) > self._max_age

    def _discard(self, conn: Any) -> None:
        with self._lock:
            self._created.pop(id(conn), None)
        try:
            conn.close()
        except Exception:
            pass
