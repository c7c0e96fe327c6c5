"""Request and result types shared by the database handle."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Final, Sequence

from .errors import QueryError

ColumnValue = str | int | float | Decimal | bytes | date | datetime | timedelta | None

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?")


class NotFoundType:
    """Type of the ``NOT_FOUND`` sentinel returned when no row matches."""

    _instance: NotFoundType | None = None

    def __new__(cls) -> NotFoundType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Final = NotFoundType()

FetchResult = ColumnValue | dict[str, ColumnValue] | NotFoundType


@dataclass(frozen=True, slots=True)
class FetchRequest:
    """One ``SELECT ... WHERE key_column = key_value`` lookup.

    ``fetch_columns``, ``table`` and ``key_column`` are written into the SQL
    text as-is and must come from a trusted source. ``key_value`` is always
    bound as a parameter.
    """

    fetch_columns: str | Sequence[str]
    table: str
    key_column: str
    key_value: str | int

    def __post_init__(self) -> None:
        # Iterators would be exhausted by the first read of ``columns``.
        if isinstance(self.fetch_columns, str):
            return
        try:
            columns = tuple(self.fetch_columns)
        except TypeError as exc:
            raise QueryError(f"Invalid column selection {self.fetch_columns!r}.") from exc
        object.__setattr__(self, "fetch_columns", columns)

    @property
    def single(self) -> bool:
        """True when a lone column name (not a sequence) was requested."""

        return isinstance(self.fetch_columns, str)

    @property
    def columns(self) -> tuple[str, ...]:
        if isinstance(self.fetch_columns, str):
            return (self.fetch_columns,)
        return self.fetch_columns

    @property
    def column_list(self) -> str:
        return ",".join(self.columns)

    @property
    def statement(self) -> str:
        return f"SELECT {self.column_list} FROM {self.table} WHERE {self.key_column} = %(key_value)s"

    @property
    def params(self) -> dict[str, str | int]:
        return {"key_value": self.key_value}

    def validate(self, *, strict_identifiers: bool = False) -> None:
        """Reject requests that cannot produce valid SQL.

        With ``strict_identifiers`` every table/column name must also be a
        plain (optionally schema-qualified) identifier.
        """

        columns = self.columns
        if not columns:
            raise QueryError("At least one column must be requested.")
        for column in columns:
            if not isinstance(column, str) or not column.strip():
                raise QueryError(f"Invalid column name {column!r}.")
        for name in (self.table, self.key_column):
            if not isinstance(name, str) or not name.strip():
                raise QueryError(f"Invalid identifier {name!r}.")
        if not strict_identifiers:
            return
        for name in (*columns, self.table, self.key_column):
            if not IDENTIFIER.fullmatch(name):
                raise QueryError(f"Identifier {name!r} is not a plain SQL identifier.")


__all__ = [
    "ColumnValue",
    "FetchRequest",
    "FetchResult",
    "IDENTIFIER",
    "NOT_FOUND",
    "NotFoundType",
]
