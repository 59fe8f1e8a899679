"""
Error taxonomy for sqlweave.

- ``TemplateError``: a template could not be interpolated (missing key, bad value shape,
  unquotable value). Always names the placeholder and the owning statement.
- ``SerializationError``: an adapter cannot express a value as a SQL literal.
- ``DatabaseError``: the backend rejected a statement or the connection failed.
- ``ConfigurationError``: no adapter available, or a named template could not be found.
- ``TransactionError``: rollback requested outside of an active transaction.
"""

from typing import Any


class SqlweaveError(Exception):
    """Base class for all sqlweave errors."""


class TemplateError(SqlweaveError):
    """Interpolating a template into SQL failed."""

    def __init__(
        self,
        cause: BaseException | str,
        *,
        name: str | None = None,
        statement: str = "SQL",
    ) -> None:
        self.cause = cause
        self.name = name
        self.statement = statement
        if name is None:
            message = f"failed interpolating {statement}: {cause}"
        else:
            message = f"failed interpolating `{name}` into {statement}: {cause}"
        super().__init__(message)


class MissingParameterError(TemplateError, KeyError):
    """A placeholder references a key absent from the parameters."""

    def __init__(self, key: str, *, statement: str = "SQL") -> None:
        self.key = key
        super().__init__(f"missing parameter {key!r}", name=key, statement=statement)

    # KeyError.__str__ would repr() the message
    __str__ = SqlweaveError.__str__


class SerializationError(SqlweaveError, TypeError):
    """A value has no SQL literal representation for this adapter."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        self.value_type = type(value)
        message = f"error serialising {self.value_type.__name__} into a SQL literal"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DatabaseError(SqlweaveError):
    """The backend failed to execute a statement. ``original`` is the driver's exception."""

    def __init__(self, message: str, *, original: BaseException | None = None) -> None:
        self.original = original
        super().__init__(message)

    @classmethod
    def wrap(cls, exc: BaseException, backend: str) -> "DatabaseError":
        return cls(f"{backend} error: {exc}", original=exc)


class ConfigurationError(SqlweaveError):
    """sqlweave is not set up to do what was asked (no adapter, missing template file)."""


class TransactionError(SqlweaveError):
    """Invalid use of the transaction helper."""


class TemplateSyntaxError(TemplateError):
    """A placeholder in the template is malformed (e.g. ``%{name`` with no closing brace)."""

    def __init__(self, message: str, *, position: int, statement: str = "SQL") -> None:
        self.position = position
        super().__init__(f"{message} at offset {position}", statement=statement)
