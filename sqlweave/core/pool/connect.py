"""
DB-API connection helpers for PostgreSQL (psycopg), MySQL (pymysql) and Trino (trino).
"""

import logging
from collections.abc import Mapping
from typing import Any

import psycopg
import pymysql
from trino.auth import BasicAuthentication
from trino.dbapi import connect as trino_connect

from sqlweave.core.config import settings

from .models import DataSource, ProductTypeEnum

_log = logging.getLogger(__name__)


def as_datasource(datasource: DataSource | Mapping[str, Any]) -> DataSource:
    """Accept a DataSource or a plain dict of connection settings."""
    if isinstance(datasource, DataSource):
        return datasource
    return DataSource.model_validate(dict(datasource))


def connect(datasource: DataSource | Mapping[str, Any]) -> Any:
    """
    Open a DB-API connection to *datasource*.

    - datasource: DataSource model or dict with product_type, host, port, database,
      username, password (and use_ssl for Trino).

    PostgreSQL and MySQL connections are opened in autocommit mode: transactions are
    controlled by the START TRANSACTION / COMMIT statements sqlweave runs.
    """
    ds = as_datasource(datasource)
    password = ds.password.get_secret_value()
    timeout = settings.DB_CONNECT_TIMEOUT

    if ds.product_type == ProductTypeEnum.TRINO and ds.use_ssl and not password.strip():
        raise ValueError("Password is required for Trino when using SSL/HTTPS.")

    _log.debug("Connecting to %s", ds.key)

    if ds.product_type == ProductTypeEnum.POSTGRES:
        return psycopg.connect(
            host=ds.host,
            port=ds.resolved_port,
            dbname=ds.database,
            user=ds.username,
            password=password,
            connect_timeout=timeout,
            autocommit=True,
        )
    if ds.product_type == ProductTypeEnum.MYSQL:
        return pymysql.connect(
            host=ds.host,
            port=ds.resolved_port,
            database=ds.database,
            user=ds.username,
            password=password,
            connect_timeout=timeout,
            autocommit=True,
        )
    if ds.product_type == ProductTypeEnum.TRINO:
        return trino_connect(
            host=ds.host,
            port=ds.resolved_port,
            user=ds.username,
            auth=BasicAuthentication(ds.username, password) if password else None,
            catalog=ds.database,
            schema=ds.trino_schema,
            source="sqlweave",
            http_scheme="https" if ds.use_ssl else "http",
            request_timeout=timeout,
        )
    raise ValueError(f"Unsupported product_type: {ds.product_type}")


def execute(
    conn: Any,
    sql: str,
    *,
    product_type: ProductTypeEnum | None = None,
    cursor: Any = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount.

    - product_type: used for DB_STATEMENT_TIMEOUT (Postgres: statement_timeout,
      MySQL: max_execution_time, Trino: query_max_execution_time). When set, applies
      the timeout before the query and resets it after.
    - cursor: run on this cursor instead of a new ``conn.cursor()`` (e.g. a
      server-side cursor for streaming).

    SQL is executed without bind parameters: it is final text rendered by sqlweave.
    """
    timeout_sec = settings.DB_STATEMENT_TIMEOUT
    with_timeout = timeout_sec is not None and timeout_sec > 0 and product_type is not None

    if with_timeout:
        _set_statement_timeout(conn, product_type, timeout_sec)

    cur = cursor if cursor is not None else conn.cursor()
    try:
        cur.execute(sql)
    finally:
        if with_timeout:
            try:
                _set_statement_timeout(conn, product_type, 0)
            except Exception:
                _log.warning("Could not reset statement timeout", exc_info=True)

    return cur


def _set_statement_timeout(conn: Any, product_type: ProductTypeEnum, timeout_sec: float) -> None:
    timeout_ms = int(timeout_sec * 1000)
    cur = conn.cursor()
    try:
        if product_type == ProductTypeEnum.POSTGRES:
            cur.execute(f"SET statement_timeout = {timeout_ms}")
        elif product_type == ProductTypeEnum.MYSQL:
            cur.execute(f"SET SESSION max_execution_time = {timeout_ms}")
        elif product_type == ProductTypeEnum.TRINO:
            cur.execute(f"SET SESSION query_max_execution_time = '{int(timeout_sec)}s'")
    finally:
        cur.close()


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for psycopg, pymysql and trino."""
    names = cursor_columns(cursor)
    if names is None:
        return []
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]


def cursor_columns(cursor: Any) -> list[str] | None:
    """Column names of the current result, or None when the statement returned no rows."""
    desc = cursor.description
    if desc is None:
        return None
    return [d[0] for d in desc]
