from collections.abc import Iterator

import pytest

from sqlweave.adapters import SQLAlchemyAdapter
from sqlweave.core import context
from sqlweave.engines.sql import parser
from tests.utils.adapter import RecordingAdapter


@pytest.fixture(autouse=True)
def _reset_default_adapter() -> Iterator[None]:
    context.set_default_adapter(None)
    yield
    context.set_default_adapter(None)


@pytest.fixture(autouse=True)
def _clear_template_cache() -> Iterator[None]:
    yield
    with parser._cache_lock:
        parser._template_cache.clear()


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def sqlite_adapter() -> Iterator[SQLAlchemyAdapter]:
    """In-memory SQLite database with an ``items(id, name)`` table."""
    adapter = SQLAlchemyAdapter.from_url("sqlite://")
    adapter.run("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)")
    yield adapter
    adapter.engine.dispose()
