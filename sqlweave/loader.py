"""
Load named SQL templates from files under ``settings.SQL_PATH``.

``load_sql("users/active")`` reads ``<SQL_PATH>/users/active.sql`` and returns a
Statement named ``users/active``, so interpolation errors point at the file.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from sqlweave.adapters.base import Adapter
from sqlweave.core.config import settings
from sqlweave.core.errors import ConfigurationError
from sqlweave.statement import Statement

_log = logging.getLogger(__name__)


def sql_file_path(name: str, sql_path: str | Path | None = None) -> Path:
    """Path of the template called *name*: ``<sql_path>/<name><SQL_EXTENSION>``."""
    base = Path(sql_path) if sql_path is not None else Path(settings.SQL_PATH)
    return base / f"{name}{settings.SQL_EXTENSION}"


def load_sql(
    name: str,
    params: Mapping[Any, Any] | None = None,
    *,
    sql_path: str | Path | None = None,
    adapter: Adapter | None = None,
) -> Statement:
    """
    Build a Statement from the template file called *name*.

    Raises:
        ConfigurationError: the file does not exist or can't be read; the message
            includes the attempted path.
    """
    name = str(name)
    path = sql_file_path(name, sql_path)
    try:
        template = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"can't load SQL template {name!r} from {path}: {e.strerror or e}") from e
    _log.debug("Loaded SQL template %s from %s", name, path)
    return Statement(template, params, name, adapter=adapter)
