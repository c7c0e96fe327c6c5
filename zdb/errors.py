"""Exception types raised by the database handle."""

from __future__ import annotations


class ZdbError(RuntimeError):
    """Base class for handle errors; carries the driver error code if known."""

    def __init__(self, message: str, code: int | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class ConfigError(ZdbError):
    """Raised when the configuration file is missing, unparsable or incomplete."""


class DatabaseConnectionError(ZdbError):
    """Raised when the driver cannot open or configure the connection."""


class QueryError(ZdbError):
    """Raised when a statement fails to prepare or execute."""


def driver_error_details(exc: BaseException) -> tuple[str, int | str | None]:
    """Return the driver's message and error code for ``exc``.

    PyMySQL errors (and ``OSError``) carry ``(code, message)`` in ``args``;
    anything else falls back to ``str(exc)`` with no code.
    """

    args = exc.args
    if len(args) >= 2 and isinstance(args[0], int):
        return str(args[1]), args[0]
    return str(exc), None


__all__ = [
    "ConfigError",
    "DatabaseConnectionError",
    "QueryError",
    "ZdbError",
    "driver_error_details",
]
