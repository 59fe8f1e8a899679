"""Unit tests for core.context (adapter resolution)."""

import threading
from unittest.mock import MagicMock, patch

import pytest

from sqlweave.adapters import SQLAlchemyAdapter
from sqlweave.adapters.base import Adapter
from sqlweave.core.context import get_adapter, set_default_adapter, use_adapter
from sqlweave.core.errors import ConfigurationError


class TestGetAdapter:
    @patch("sqlweave.core.context.settings")
    def test_no_adapter_configured(self, mock_settings: MagicMock):
        mock_settings.DATABASE_URL = None
        with pytest.raises(ConfigurationError) as exc_info:
            get_adapter()
        assert "no adapter configured" in str(exc_info.value)

    def test_default_adapter(self):
        adapter = MagicMock(spec=Adapter)
        set_default_adapter(adapter)
        assert get_adapter() is adapter

    def test_set_default_rejects_non_adapter(self):
        with pytest.raises(TypeError):
            set_default_adapter("sqlite://")

    def test_use_adapter_overrides_default_and_restores(self):
        default = MagicMock(spec=Adapter)
        scoped = MagicMock(spec=Adapter)
        set_default_adapter(default)
        with use_adapter(scoped) as bound:
            assert bound is scoped
            assert get_adapter() is scoped
        assert get_adapter() is default

    def test_use_adapter_nests(self):
        a = MagicMock(spec=Adapter)
        b = MagicMock(spec=Adapter)
        with use_adapter(a):
            with use_adapter(b):
                assert get_adapter() is b
            assert get_adapter() is a

    def test_scoped_adapter_not_visible_in_other_threads(self):
        default = MagicMock(spec=Adapter)
        scoped = MagicMock(spec=Adapter)
        set_default_adapter(default)
        seen = []
        with use_adapter(scoped):
            t = threading.Thread(target=lambda: seen.append(get_adapter()))
            t.start()
            t.join()
            assert get_adapter() is scoped
        assert seen == [default]

    @patch("sqlweave.core.context.settings")
    def test_autodetect_from_database_url(self, mock_settings: MagicMock):
        mock_settings.DATABASE_URL = "sqlite://"
        adapter = get_adapter()
        try:
            assert isinstance(adapter, SQLAlchemyAdapter)
            assert adapter.backend == "sqlite"
            # cached as the process default
            assert get_adapter() is adapter
        finally:
            adapter.engine.dispose()
