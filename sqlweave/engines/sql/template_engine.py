"""
Interpolation engine: render a parsed SQL template against a parameter mapping.

Literal values are quoted through a ``quote`` callable supplied by the caller,
normally ``Adapter.quote``, so the rendered text uses the backend's literal syntax.

Every failure while evaluating a placeholder is raised as ``TemplateError`` naming the
placeholder and the statement it belongs to, e.g.
``failed interpolating `expiry` into revenue_report: error serialising object ...``.
"""

import abc
import dataclasses
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sqlweave.core.errors import ConfigurationError, MissingParameterError, TemplateError

from .parser import Fragment, List, Literal, NestedList, Node, Text, parse

Quote = Callable[[Any], str]


class SQLFragment(abc.ABC):
    """A value that may be interpolated with ``%{!name}``.

    Implemented by ``Statement``: the fragment renders its own template against its
    own parameters, quoting with the engine of the enclosing statement.
    """

    @abc.abstractmethod
    def render_fragment(self, engine: "SQLTemplateEngine") -> str:
        """Render this fragment with *engine*."""


def _normalise_params(params: Any) -> dict[str, Any]:
    if not isinstance(params, Mapping):
        raise TypeError(f"parameters must be a mapping, got {type(params).__name__}")
    return {str(k): v for k, v in params.items()}


def _as_list(value: Any) -> list[Any]:
    """None -> []; scalars (including strings and mappings) -> [value]; iterables -> list."""
    if value is None:
        return []
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    if hasattr(value, "_asdict"):
        return value._asdict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if hasattr(value, "model_dump"):
        return value.model_dump()
    raise TypeError(f"can't convert {type(value).__name__} into a mapping")


class SQLTemplateEngine:
    """Renders sqlweave templates, quoting literals with *quote*."""

    def __init__(self, quote: Quote) -> None:
        self.quote = quote

    def render(self, template: str, params: Mapping[str, Any], *, name: str = "SQL") -> str:
        """Render *template* with *params* to final SQL text.

        Raises:
            TemplateError: a placeholder is malformed, references a missing key, or its
                value cannot be interpolated.
        """
        try:
            values = _normalise_params(params)
        except TypeError as e:
            raise TemplateError(e, statement=name) from e
        return self._render_nodes(parse(template, statement=name), values, name)

    def _render_nodes(self, nodes: Iterable[Node], values: dict[str, Any], statement: str) -> str:
        parts: list[str] = []
        for node in nodes:
            if isinstance(node, Text):
                parts.append(node.text)
                continue
            if node.name not in values:
                raise MissingParameterError(node.name, statement=statement)
            value = values[node.name]
            try:
                parts.append(self._evaluate(node, value, statement))
            except (TemplateError, ConfigurationError):
                raise
            except Exception as e:
                raise TemplateError(e, name=node.name, statement=statement) from e
        return "".join(parts)

    def _evaluate(self, node: Node, value: Any, statement: str) -> str:
        if isinstance(node, NestedList):
            return self._nested_list(node, value, statement)
        if isinstance(node, List):
            return self._list(value)
        if isinstance(node, Fragment):
            return self._fragment(value)
        if isinstance(node, Literal):
            return self.quote(value)
        raise TypeError(f"unknown template node {node!r}")

    def _nested_list(self, node: NestedList, value: Any, statement: str) -> str:
        items = _as_list(value)
        if not items:
            raise ValueError("array must not be empty")
        rows = []
        for item in items:
            values = _normalise_params(_as_mapping(item))
            rows.append("(" + self._render_nodes(node.body, values, statement) + ")")
        return ", ".join(rows)

    def _list(self, value: Any) -> str:
        items = _as_list(value)
        # An empty IN-list is not valid SQL
        if not items:
            return "(NULL)"
        return "(" + ", ".join(self.quote(v) for v in items) + ")"

    def _fragment(self, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, SQLFragment):
            raise TypeError(f"fragment interpolation requires a Statement, got {type(value).__name__}")
        return value.render_fragment(self)
