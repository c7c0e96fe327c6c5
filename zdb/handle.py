"""Database handle owning one MySQL connection plus a column-fetch helper."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Sequence

import pymysql
from pymysql.cursors import DictCursor

from .config import DatabaseConfig, load_config
from .errors import DatabaseConnectionError, QueryError, driver_error_details
from .models import NOT_FOUND, ColumnValue, FetchRequest, FetchResult, NotFoundType

LOG = logging.getLogger(__name__)

DRIVER_ERRORS: tuple[type[BaseException], ...] = (pymysql.err.Error, OSError)

Connect = Callable[..., Any]


class Database:
    """Open connection to the database described by an INI config file.

    The driver connection is exposed as ``connection`` and any attribute not
    defined here (``cursor``, ``commit``, ``ping``, ...) is forwarded to it.
    A handle is not safe to share between threads; use one per thread.
    """

    def __init__(
        self,
        config: DatabaseConfig | str | os.PathLike[str],
        *,
        strict_identifiers: bool = False,
        connect: Connect = pymysql.connect,
    ) -> None:
        if not isinstance(config, DatabaseConfig):
            config = load_config(config)
        self._config = config
        self._strict_identifiers = strict_identifiers
        self._connection = self._open(config, connect)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def connection(self) -> Any:
        """Underlying driver connection."""

        return self._connection

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not found on the handle itself.
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._connection, name)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection; a no-op if it is already closed."""

        try:
            self._connection.close()
        except pymysql.err.Error:
            LOG.debug("Connection already closed", extra={"dsn": self._config.dsn})

    def get_column_value(
        self,
        fetch_columns: str | Sequence[str],
        table: str,
        key_column: str,
        key_value: str | int,
    ) -> FetchResult:
        """Fetch column value(s) from the first row where ``key_column = key_value``.

        A single column name returns that column's value; a sequence of names
        (even of length one) returns a ``{column: value}`` dict. ``NOT_FOUND``
        is returned when no row matches. Extra matching rows are ignored.

        Only ``key_value`` is bound as a query parameter. ``fetch_columns``,
        ``table`` and ``key_column`` are written into the SQL text verbatim
        and must never come from untrusted input (see ``strict_identifiers``).

        Raises QueryError when the statement cannot be prepared or executed.
        """

        request = FetchRequest(
            fetch_columns=fetch_columns,
            table=table,
            key_column=key_column,
            key_value=key_value,
        )
        row = self.fetch_row(request)
        if isinstance(row, NotFoundType):
            return NOT_FOUND
        if request.single:
            return _first_value(row)
        return _requested_values(row, request.columns)

    def fetch_row(self, request: FetchRequest) -> dict[str, ColumnValue] | NotFoundType:
        """Execute ``request`` and return its first row, or ``NOT_FOUND``."""

        request.validate(strict_identifiers=self._strict_identifiers)
        statement = request.statement
        LOG.debug("Executing statement", extra={"statement": statement})
        try:
            with self._connection.cursor() as cursor:
                cursor.execute(statement, request.params)
                row = cursor.fetchone()
        except DRIVER_ERRORS as exc:
            message, code = driver_error_details(exc)
            LOG.warning("Query failed", extra={"statement": statement, "code": code})
            raise QueryError(message, code) from exc
        if row is None:
            return NOT_FOUND
        return dict(row)

    def _open(self, config: DatabaseConfig, connect: Connect) -> Any:
        try:
            connection = connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database_name,
                cursorclass=DictCursor,
                autocommit=True,
            )
        except DRIVER_ERRORS as exc:
            message, code = driver_error_details(exc)
            LOG.warning("Failed to connect", extra={"dsn": config.dsn, "code": code})
            raise DatabaseConnectionError(message, code) from exc
        LOG.info("Connected", extra={"dsn": config.dsn})
        return connection

    def __repr__(self) -> str:
        return f"Database(dsn={self._config.dsn!r})"


def _first_value(row: dict[str, ColumnValue]) -> ColumnValue:
    return next(iter(row.values()))


def _requested_values(row: dict[str, ColumnValue], columns: tuple[str, ...]) -> dict[str, ColumnValue]:
    # DictCursor renames a repeated column to "table.column"; keep one entry per name.
    return {
        key: value
        for key, value in row.items()
        if key in columns or "." not in key or key.split(".", 1)[1] not in row
    }


__all__ = ["DRIVER_ERRORS", "Database"]
