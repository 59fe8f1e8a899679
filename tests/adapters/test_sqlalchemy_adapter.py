"""Tests for adapters.sqlalchemy_adapter against an in-memory SQLite database."""

import json
from unittest.mock import MagicMock

import pytest

from sqlweave.adapters import SQLAlchemyAdapter
from sqlweave.core.errors import DatabaseError


class TestSQLAlchemyAdapterQueries:
    def test_fetch_rows(self, sqlite_adapter):
        sqlite_adapter.run("INSERT INTO items (id, name) VALUES (1, 'a'), (2, 'b')")
        rows = sqlite_adapter.fetch_rows("SELECT id, name FROM items ORDER BY id")
        assert rows == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    def test_fetch_rows_for_statement_without_result(self, sqlite_adapter):
        assert sqlite_adapter.fetch_rows("INSERT INTO items (id, name) VALUES (1, 'a')") == []

    def test_fetch_count_dml_and_query(self, sqlite_adapter):
        assert sqlite_adapter.fetch_count("INSERT INTO items (id, name) VALUES (1, 'a'), (2, 'b')") == 2
        assert sqlite_adapter.fetch_count("SELECT * FROM items") == 2
        assert sqlite_adapter.fetch_count("UPDATE items SET name = 'c' WHERE id = 9") == 0

    def test_first_helpers(self, sqlite_adapter):
        sqlite_adapter.run("INSERT INTO items (id, name) VALUES (1, 'a'), (2, 'b')")
        q = "SELECT name, id FROM items ORDER BY id"
        assert sqlite_adapter.fetch_first_row(q) == {"name": "a", "id": 1}
        assert sqlite_adapter.fetch_first_column(q) == ["a", "b"]
        assert sqlite_adapter.fetch_first_field(q) == "a"
        assert sqlite_adapter.fetch_first_row("SELECT * FROM items WHERE id = 9") is None
        assert sqlite_adapter.fetch_first_field("SELECT * FROM items WHERE id = 9") is None

    def test_fetch_each_row_callback_and_iterator(self, sqlite_adapter):
        sqlite_adapter.run("INSERT INTO items (id, name) VALUES (1, 'a'), (2, 'b')")
        seen = []
        assert sqlite_adapter.fetch_each_row("SELECT id FROM items ORDER BY id", seen.append) is None
        assert seen == [{"id": 1}, {"id": 2}]
        assert list(sqlite_adapter.fetch_each_row("SELECT id FROM items ORDER BY id")) == seen

    def test_percent_sign_sent_verbatim(self, sqlite_adapter):
        sqlite_adapter.run("INSERT INTO items (id, name) VALUES (1, '50%')")
        assert sqlite_adapter.fetch_first_field("SELECT name FROM items WHERE name LIKE '%\\%' ESCAPE '\\'") == "50%"

    def test_invalid_sql_raises_database_error(self, sqlite_adapter):
        with pytest.raises(DatabaseError) as exc_info:
            sqlite_adapter.run("SELEC 1")
        assert str(exc_info.value).startswith("sqlite error: ")
        assert exc_info.value.original is not None

    def test_session_pins_one_connection(self, sqlite_adapter):
        with sqlite_adapter.session() as a:
            with sqlite_adapter.session() as b:
                assert a is b
            sqlite_adapter.run("BEGIN")
            sqlite_adapter.run("INSERT INTO items (id, name) VALUES (1, 'a')")
            sqlite_adapter.run("ROLLBACK")
        assert sqlite_adapter.fetch_count("SELECT * FROM items") == 0


class TestSQLAlchemyAdapterQuote:
    def test_quote_common_types(self, sqlite_adapter):
        assert sqlite_adapter.quote("It's") == "'It''s'"
        assert sqlite_adapter.quote(None) == "NULL"
        assert sqlite_adapter.quote([1, "a"]) == "(1, 'a')"

    def _adapter(self, dialect: str, native_boolean: bool) -> SQLAlchemyAdapter:
        engine = MagicMock()
        engine.dialect.name = dialect
        engine.dialect.supports_native_boolean = native_boolean
        return SQLAlchemyAdapter(engine)

    def test_bool_without_native_boolean(self):
        adapter = self._adapter("mssql", False)
        assert adapter.quote(True) == "1"
        assert adapter.quote(False) == "0"

    def test_bool_with_native_boolean(self):
        assert self._adapter("postgresql", True).quote(True) == "TRUE"

    def test_mysql_escapes_backslash(self):
        adapter = self._adapter("mysql", True)
        assert adapter.quote("a\\b'") == "'a\\\\b'''"
        assert adapter.quote(["a\\b"]) == "('a\\\\b')"

    def test_postgres_keeps_backslash(self):
        assert self._adapter("postgresql", True).quote("a\\b") == "'a\\b'"


class TestSQLAlchemyAdapterConnections:
    def _unreachable(self, tmp_path) -> SQLAlchemyAdapter:
        return SQLAlchemyAdapter.from_url(f"sqlite:///{tmp_path / 'missing' / 'app.db'}")

    def test_connection_failure_raises_database_error(self, tmp_path):
        adapter = self._unreachable(tmp_path)
        with pytest.raises(DatabaseError) as exc_info:
            adapter.fetch_rows("SELECT 1")
        assert str(exc_info.value).startswith("sqlite error: ")

    def test_connection_failure_in_session(self, tmp_path):
        adapter = self._unreachable(tmp_path)
        with pytest.raises(DatabaseError):
            with adapter.session():
                pass

    def test_connection_failure_when_streaming(self, tmp_path):
        adapter = self._unreachable(tmp_path)
        with pytest.raises(DatabaseError):
            list(adapter.fetch_each_row("SELECT 1"))

    def test_closing_stream_early_releases_connection(self, tmp_path):
        adapter = SQLAlchemyAdapter.from_url(f"sqlite:///{tmp_path / 'app.db'}")
        try:
            adapter.run("CREATE TABLE items (id INTEGER PRIMARY KEY)")
            adapter.run("INSERT INTO items (id) VALUES (1), (2), (3)")
            rows = adapter.fetch_each_row("SELECT id FROM items ORDER BY id")
            assert next(rows) == {"id": 1}
            assert adapter.engine.pool.checkedout() == 1
            rows.close()
            assert adapter.engine.pool.checkedout() == 0
        finally:
            adapter.engine.dispose()


class TestSQLAlchemyAdapterJson:
    def _adapter(self, dialect: str) -> SQLAlchemyAdapter:
        engine = MagicMock()
        engine.dialect.name = dialect
        engine.dialect.supports_native_boolean = True
        return SQLAlchemyAdapter(engine)

    def test_mysql_json_goes_through_string_escaping(self):
        value = {"k": 'x"y\\z'}
        text = json.dumps(value)
        assert self._adapter("mysql").quote(value) == "'" + text.replace("\\", "\\\\") + "'"

    def test_json_elsewhere_only_doubles_quotes(self):
        value = {"k": "it's \\"}
        assert self._adapter("postgresql").quote(value) == "'" + json.dumps(value).replace("'", "''") + "'"
