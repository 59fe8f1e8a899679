"""
SQL literal rendering shared by the adapters.

Every function returns a string that can be embedded in SQL text as-is. Values
without a literal form raise ``SerializationError`` rather than being guessed at.
"""

import json
import math
import uuid
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlweave.core.errors import SerializationError

# Single-quote escape for SQL strings
_SQL_QUOTE_ESCAPE = str.maketrans({"'": "''"})


def sql_string(value: str) -> str:
    """Single-quote *value*, doubling embedded quotes: ``It's`` -> ``'It''s'``."""
    if "\x00" in value:
        raise SerializationError(value, "strings may not contain NUL characters")
    return "'" + value.translate(_SQL_QUOTE_ESCAPE) + "'"


def sql_number(value: int | float | Decimal) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        raise SerializationError(value, f"{value} has no SQL numeric literal")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise SerializationError(value, f"{value} has no SQL numeric literal")
        return format(value, "f")
    return str(value)


def sql_bool(value: bool, *, true: str = "TRUE", false: str = "FALSE") -> str:
    return true if value else false


def sql_date(value: date) -> str:
    """ISO date ``'YYYY-MM-DD'``."""
    return f"'{value.isoformat()}'"


def sql_datetime(value: datetime) -> str:
    """ISO timestamp with a space separator, keeping the UTC offset when present."""
    return f"'{value.isoformat(sep=' ')}'"


def sql_time(value: time) -> str:
    return f"'{value.isoformat()}'"


def json_text(value: dict) -> str:
    """Serialise *value* to JSON text; values JSON can't express are rejected."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise SerializationError(value, str(e)) from e


def sql_json(value: dict) -> str:
    """JSON text as a quoted string."""
    return sql_string(json_text(value))


def sql_row(values: list | tuple, quote: Callable[[Any], str]) -> str:
    """``(v1, v2, ...)`` with each value rendered by *quote*; ``(NULL)`` for no values."""
    if not values:
        return "(NULL)"
    return "(" + ", ".join(quote(v) for v in values) + ")"


def quote_literal(value: Any, *, true: str = "TRUE", false: str = "FALSE") -> str:
    """Render *value* as a SQL literal.

    * ``None`` -> ``NULL``
    * ``bool`` -> *true* / *false* (``TRUE`` / ``FALSE`` unless the backend needs ``1`` / ``0``)
    * ``int`` / ``float`` / ``Decimal`` -> unquoted numeric text
    * ``str`` -> quoted, quotes doubled
    * ``datetime`` / ``date`` / ``time`` -> quoted ISO text
    * ``uuid.UUID`` -> quoted canonical text
    * ``list`` / ``tuple`` -> parenthesised list of literals, e.g. ``(1, 'a')`` (``(NULL)`` when empty)
    * ``dict`` -> quoted JSON text

    Raises:
        SerializationError: for any other type.
    """
    if value is None:
        return "NULL"
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return sql_bool(value, true=true, false=false)
    if isinstance(value, (int, float, Decimal)):
        return sql_number(value)
    if isinstance(value, str):
        return sql_string(value)
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime):
        return sql_datetime(value)
    if isinstance(value, date):
        return sql_date(value)
    if isinstance(value, time):
        return sql_time(value)
    if isinstance(value, uuid.UUID):
        return sql_string(str(value))
    if isinstance(value, (list, tuple)):
        return sql_row(value, lambda v: quote_literal(v, true=true, false=false))
    if isinstance(value, dict):
        return sql_json(value)
    raise SerializationError(value)
