"""Test helpers: an in-memory adapter that records the SQL it is asked to run."""

from typing import Any

from sqlweave.adapters.base import Adapter, Row
from sqlweave.engines.sql.literals import quote_literal


class RecordingAdapter(Adapter):
    """
    Quotes with ``quote_literal`` and records every executed statement in ``executed``.

    - rows: returned by ``fetch_rows`` for every query.
    - count: returned by ``fetch_count``.
    - fail_on: raise ``fail_with`` when the executed SQL equals this text.
    """

    def __init__(
        self,
        rows: list[Row] | None = None,
        *,
        count: int = 0,
        fail_on: str | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self.rows = rows or []
        self.count = count
        self.fail_on = fail_on
        self.fail_with = fail_with or RuntimeError("boom")
        self.executed: list[str] = []
        self.sessions_entered = 0

    def quote(self, value: Any) -> str:
        return quote_literal(value)

    def _record(self, sql: str) -> None:
        self.executed.append(sql)
        if self.fail_on is not None and sql == self.fail_on:
            raise self.fail_with

    def run(self, sql: str) -> None:
        self._record(sql)

    def fetch_rows(self, sql: str) -> list[Row]:
        self._record(sql)
        return [dict(r) for r in self.rows]

    def fetch_count(self, sql: str) -> int:
        self._record(sql)
        return self.count

    def session(self):
        self.sessions_entered += 1
        return super().session()
