"""
Adapter resolution for statements and transactions created without an explicit adapter.

Resolution order:

1. the adapter bound to the current thread / asyncio task with ``use_adapter()``
2. the process default set with ``set_default_adapter()``
3. a ``SQLAlchemyAdapter`` built once from ``settings.DATABASE_URL``

Scoped adapters live in a ``ContextVar``: a worker that calls ``use_adapter()`` never
affects the main thread or its sibling workers, while workers that don't override it
see the process default.
"""

import contextvars
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlweave.adapters.base import Adapter
from sqlweave.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from sqlweave.core.config import settings
from sqlweave.core.errors import ConfigurationError

_log = logging.getLogger(__name__)

_scoped_adapter: contextvars.ContextVar[Adapter | None] = contextvars.ContextVar(
    "sqlweave_adapter", default=None
)
_default_adapter: Adapter | None = None
_default_lock = threading.Lock()


def set_default_adapter(adapter: Adapter | None) -> None:
    """Set (or with ``None``, clear) the process-wide default adapter."""
    global _default_adapter
    if adapter is not None and not isinstance(adapter, Adapter):
        raise TypeError(f"expected an Adapter, got {type(adapter).__name__}")
    with _default_lock:
        _default_adapter = adapter


def get_adapter() -> Adapter:
    """Return the adapter for the current scope.

    Raises:
        ConfigurationError: no adapter is bound or set and ``DATABASE_URL`` is empty.
    """
    global _default_adapter
    scoped = _scoped_adapter.get()
    if scoped is not None:
        return scoped
    with _default_lock:
        if _default_adapter is None:
            _default_adapter = _autodetect()
        return _default_adapter


@contextmanager
def use_adapter(adapter: Adapter) -> Iterator[Adapter]:
    """Bind *adapter* to the current thread / task for the duration of the block.

    Example::

        with use_adapter(reporting_adapter):
            rows = sql("select * from revenue").rows()
    """
    token = _scoped_adapter.set(adapter)
    try:
        yield adapter
    finally:
        _scoped_adapter.reset(token)


def _autodetect() -> Adapter:
    if not settings.DATABASE_URL:
        raise ConfigurationError(
            "no adapter configured: pass adapter=, call set_default_adapter(), "
            "or set SQLWEAVE_DATABASE_URL"
        )
    adapter = SQLAlchemyAdapter.from_url(settings.DATABASE_URL)
    _log.info("Using %r from SQLWEAVE_DATABASE_URL", adapter)
    return adapter
