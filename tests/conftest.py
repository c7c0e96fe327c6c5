"""Shared fixtures: an in-memory stand-in for a PyMySQL connection."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import pymysql
import pytest

from zdb.config import DatabaseConfig

CONFIG_TEXT = """
[database]
db_host = "db.example.com"
db_name = "app"
db_user = "reader"
db_pass = "s3cret"
"""


class FakeCursor:
    """DictCursor look-alike backed by sqlite3 (``%(name)s`` -> ``:name``)."""

    def __init__(self, connection: FakeConnection) -> None:
        self._connection = connection
        self._cursor = connection.db.cursor()

    def __enter__(self) -> FakeCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._cursor.close()

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        self._connection.executed.append((sql, params))
        if self._connection.fail_with is not None:
            raise self._connection.fail_with
        try:
            self._cursor.execute(sql.replace("%(key_value)s", ":key_value"), params or {})
        except sqlite3.Error as exc:
            raise pymysql.err.ProgrammingError(1146, str(exc)) from exc
        return 0

    def fetchone(self) -> dict[str, Any] | None:
        row = self._cursor.fetchone()
        if row is None:
            return None
        names = [column[0] for column in self._cursor.description]
        return dict(zip(names, row))


class FakeConnection:
    def __init__(self) -> None:
        self.db = sqlite3.connect(":memory:")
        self.executed: list[tuple[str, dict[str, Any] | None]] = []
        self.fail_with: BaseException | None = None
        self.closed = False
        self.connect_kwargs: dict[str, Any] = {}

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def ping(self, reconnect: bool = False) -> None:
        return None

    def close(self) -> None:
        if self.closed:
            raise pymysql.err.Error("Already closed")
        self.closed = True
        self.db.close()


@pytest.fixture
def connection() -> FakeConnection:
    conn = FakeConnection()
    conn.db.executescript(
        """
        CREATE TABLE people (id INTEGER, name TEXT, age INTEGER);
        INSERT INTO people VALUES (1, 'Ann', 30);
        INSERT INTO people VALUES (2, NULL, 0);
        INSERT INTO people VALUES (3, 'Cara', 41);
        INSERT INTO people VALUES (3, 'Cara again', 42);
        """
    )
    return conn


@pytest.fixture
def connect(connection: FakeConnection):
    def _connect(**kwargs: Any) -> FakeConnection:
        connection.connect_kwargs = kwargs
        return connection

    return _connect


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "database.ini"
    path.write_text(CONFIG_TEXT)
    return path


@pytest.fixture
def db_config() -> DatabaseConfig:
    return DatabaseConfig(host="localhost", database_name="app", user="reader", password="s3cret")
