"""
Parse SQL templates into placeholder nodes.

Placeholder forms (``name`` is ``[A-Za-z0-9_]+``):

* ``%{name}``                 Literal: the value, quoted by the adapter
* ``%{(name)}``               List: ``(v1, v2, ...)``, ``(NULL)`` when empty
* ``%{name(inner template)}`` NestedList: *inner template* once per mapping in the value
* ``%{!name}``                Fragment: another Statement, interpolated unquoted

A ``%{`` that does not start one of these forms is plain SQL text. Once a form is
recognised (``%{name``, ``%{(name``, ``%{!name``) it must be closed properly or
``TemplateSyntaxError`` is raised.

Parsed templates are cached (LRU keyed by template text) so statements that are
rendered repeatedly skip the parse phase.
"""

import re
import threading
from collections import OrderedDict
from dataclasses import dataclass

from sqlweave.core.errors import TemplateSyntaxError

_NAME = re.compile(r"[A-Za-z0-9_]+")

_CACHE_MAX_SIZE = 512
_template_cache: OrderedDict[str, tuple["Node", ...]] = OrderedDict()
_cache_lock = threading.Lock()


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Literal:
    name: str


@dataclass(frozen=True)
class List:
    name: str


@dataclass(frozen=True)
class NestedList:
    name: str
    body: tuple["Node", ...]


@dataclass(frozen=True)
class Fragment:
    name: str


Node = Text | Literal | List | NestedList | Fragment
Placeholder = Literal | List | NestedList | Fragment


class _Parser:
    def __init__(self, source: str, statement: str) -> None:
        self.source = source
        self.statement = statement
        self.pos = 0

    def parse(self) -> tuple[Node, ...]:
        return self._sequence(nested=False)

    def _error(self, message: str, position: int) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, position=position, statement=self.statement)

    def _name_at(self, pos: int) -> tuple[str, int]:
        m = _NAME.match(self.source, pos)
        if m is None:
            return "", pos
        return m.group(0), m.end()

    def _sequence(self, *, nested: bool) -> tuple[Node, ...]:
        """Parse nodes until end of input, or until the ``)}`` closing a nested list body."""
        src = self.source
        length = len(src)
        opened_at = self.pos
        nodes: list[Node] = []
        buf: list[str] = []
        depth = 0

        def flush() -> None:
            if buf:
                nodes.append(Text("".join(buf)))
                buf.clear()

        while self.pos < length:
            ch = src[self.pos]

            if ch == "%" and src.startswith("{", self.pos + 1):
                node = self._placeholder()
                if node is None:
                    buf.append("%{")
                    self.pos += 2
                else:
                    flush()
                    nodes.append(node)
                continue

            if nested:
                if ch == "(":
                    depth += 1
                elif ch == ")":
                    if depth == 0 and src.startswith("}", self.pos + 1):
                        flush()
                        self.pos += 2
                        return tuple(nodes)
                    depth = max(depth - 1, 0)

            buf.append(ch)
            self.pos += 1

        if nested:
            raise self._error("nested list is missing its closing ')}'", opened_at)
        flush()
        return tuple(nodes)

    def _placeholder(self) -> Placeholder | None:
        """Parse the placeholder starting at ``self.pos`` (a ``%{``), or return None if
        the text there is not a placeholder."""
        src = self.source
        start = self.pos
        p = start + 2
        marker = src[p : p + 1]

        if marker == "(":
            name, end = self._name_at(p + 1)
            if not name:
                return None
            if not src.startswith(")}", end):
                raise self._error(f"list placeholder `{name}` must end with ')}}'", start)
            self.pos = end + 2
            return List(name)

        if marker == "!":
            name, end = self._name_at(p + 1)
            if not name:
                return None
            if not src.startswith("}", end):
                raise self._error(f"fragment placeholder `{name}` must end with '}}'", start)
            self.pos = end + 1
            return Fragment(name)

        name, end = self._name_at(p)
        if not name:
            return None
        if src.startswith("}", end):
            self.pos = end + 1
            return Literal(name)
        if src.startswith("(", end):
            self.pos = end + 1
            body = self._sequence(nested=True)
            return NestedList(name, body)
        raise self._error(f"placeholder `{name}` must end with '}}' or open a nested list with '('", start)


def parse(template: str, *, statement: str = "SQL") -> tuple[Node, ...]:
    """Parse *template* into a tuple of nodes (cached).

    Raises:
        TemplateSyntaxError: a placeholder is started but not properly closed.
    """
    with _cache_lock:
        nodes = _template_cache.get(template)
        if nodes is not None:
            _template_cache.move_to_end(template)
            return nodes
    nodes = _Parser(template, statement).parse()
    with _cache_lock:
        _template_cache[template] = nodes
        if len(_template_cache) > _CACHE_MAX_SIZE:
            _template_cache.popitem(last=False)
    return nodes


def parse_parameters(template: str) -> list[str]:
    """
    Names referenced by the top level of *template*, sorted and de-duplicated.

    These are the keys the parameter mapping must provide. Names used inside a nested
    list body are looked up in each element of that list, so they are not included.
    """
    names = {node.name for node in parse(template) if not isinstance(node, Text)}
    return sorted(names)
