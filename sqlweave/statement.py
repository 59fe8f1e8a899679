"""
Statement: a SQL template plus its parameters, rendered and executed on demand.

Placeholders (see ``sqlweave.engines.sql.parser``)::

    # Literal
    sql("SELECT * FROM users WHERE created_at > %{date}", {"date": date.today()})
    # SELECT * FROM users WHERE created_at > '2021-02-22'

    # List
    sql("SELECT * FROM users WHERE name IN %{(names)}", {"names": ["user1", "user2"]})
    # SELECT * FROM users WHERE name IN ('user1', 'user2')

    # Nested list
    sql("INSERT INTO users (name, created_at) VALUES %{users(%{name}, now())}",
        {"users": [{"name": "Claudia Buss"}, {"name": "Lundy L'Anglais"}]})
    # INSERT INTO users (name, created_at) VALUES ('Claudia Buss', now()), ('Lundy L''Anglais', now())

    # Fragment
    sql("SELECT * FROM users ORDER BY %{!orderby}", {"orderby": sql("name asc")})
    # SELECT * FROM users ORDER BY name asc

Rendering never executes anything. Every execution method renders again and runs the
statement again; nothing is cached between calls.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from sqlweave.adapters.base import Adapter, Row, RowCallback
from sqlweave.core.context import get_adapter
from sqlweave.engines.sql import SQLFragment, SQLTemplateEngine


class Statement(SQLFragment):
    """A template, its parameters and a display name used in error messages.

    - adapter: run and quote with this adapter; when omitted the adapter is resolved
      with ``get_adapter()`` each time the statement is rendered.
    """

    def __init__(
        self,
        template: str,
        params: Mapping[Any, Any] | None = None,
        name: str = "SQL",
        *,
        adapter: Adapter | None = None,
    ) -> None:
        if not isinstance(template, str):
            raise TypeError(f"template must be a str, got {type(template).__name__}")
        if params is not None and not isinstance(params, Mapping):
            raise TypeError(f"params must be a mapping, got {type(params).__name__}")
        self._template = template
        self._params = MappingProxyType({str(k): v for k, v in (params or {}).items()})
        self._name = str(name)
        self._adapter = adapter

    @property
    def template(self) -> str:
        return self._template

    @property
    def params(self) -> Mapping[str, Any]:
        return self._params

    @property
    def name(self) -> str:
        return self._name

    @property
    def adapter(self) -> Adapter:
        return self._adapter if self._adapter is not None else get_adapter()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Interpolate the parameters into the template.

        Raises:
            TemplateError: a parameter is missing or can't be interpolated.
            ConfigurationError: no adapter is available for quoting.
        """
        return self._render(self.adapter)

    to_sql = render

    def render_fragment(self, engine: SQLTemplateEngine) -> str:
        return engine.render(self._template, self._params, name=self._name)

    def _render(self, adapter: Adapter) -> str:
        return SQLTemplateEngine(adapter.quote).render(self._template, self._params, name=self._name)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def rows(self) -> list[Row]:
        """All rows as ``{column: value}`` dicts."""
        adapter = self.adapter
        return adapter.fetch_rows(self._render(adapter))

    def first_row(self) -> Row | None:
        adapter = self.adapter
        return adapter.fetch_first_row(self._render(adapter))

    def first_column(self) -> list[Any]:
        adapter = self.adapter
        return adapter.fetch_first_column(self._render(adapter))

    def first_field(self) -> Any:
        adapter = self.adapter
        return adapter.fetch_first_field(self._render(adapter))

    def count(self) -> int:
        """Rows affected (DML) or returned (queries)."""
        adapter = self.adapter
        return adapter.fetch_count(self._render(adapter))

    def run(self) -> None:
        adapter = self.adapter
        adapter.run(self._render(adapter))

    def each_row(self, callback: RowCallback | None = None) -> Iterator[Row] | None:
        """Pass each row to *callback*, or return an iterator over the rows when no
        callback is given (see ``Adapter.fetch_each_row``)."""
        adapter = self.adapter
        return adapter.fetch_each_row(self._render(adapter), callback)

    def __repr__(self) -> str:
        return f"<Statement {self._name}: {self._template!r}>"


def sql(
    template: str,
    params: Mapping[Any, Any] | None = None,
    name: str = "SQL",
    *,
    adapter: Adapter | None = None,
) -> Statement:
    """Build a ``Statement``; shorthand for ``Statement(template, params, name)``."""
    return Statement(template, params, name, adapter=adapter)


def run(
    template: str,
    params: Mapping[Any, Any] | None = None,
    *,
    adapter: Adapter | None = None,
) -> None:
    """Render and run *template* once, discarding any result."""
    Statement(template, params, adapter=adapter).run()
