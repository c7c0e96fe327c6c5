"""Database configuration loading helpers."""

from __future__ import annotations

import configparser
import logging
import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

LOG = logging.getLogger(__name__)

CONFIG_SECTION = "database"
DEFAULT_PORT = 3306

# INI key for each DatabaseConfig field.
CONFIG_KEYS: dict[str, str] = {
    "host": "db_host",
    "database_name": "db_name",
    "user": "db_user",
    "password": "db_pass",
    "port": "db_port",
}
REQUIRED_KEYS = ("db_host", "db_name", "db_user", "db_pass")

_TRUE_WORDS = frozenset({"true", "on", "yes"})
_FALSE_WORDS = frozenset({"false", "off", "no", "none"})
_INTEGER = re.compile(r"-?\d+")

IniValue = str | int | bool | None


class DatabaseConfig(BaseModel):
    """Connection settings read from the ``[database]`` section."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    host: str = Field(min_length=1)
    database_name: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str = Field(repr=False)
    port: int = Field(default=DEFAULT_PORT, gt=0, le=65535)

    @property
    def dsn(self) -> str:
        """Connection target in ``host=...;dbname=...`` form (no credentials)."""

        return f"host={self.host};dbname={self.database_name}"


def load_config(path: str | os.PathLike[str]) -> DatabaseConfig:
    """Load the ``[database]`` section of an INI file into a DatabaseConfig.

    Raises ConfigError when the file cannot be read or parsed, when the
    section or any required key is absent, or when a value has the wrong
    shape. A partially populated config is never returned.
    """

    data = read_config_file(path)
    section = data.get(CONFIG_SECTION)
    if section is None:
        raise ConfigError(f"Config file '{path}' has no [{CONFIG_SECTION}] section.")
    missing = [key for key in REQUIRED_KEYS if key not in section]
    if missing:
        raise ConfigError(
            f"Config file '{path}' is missing required [{CONFIG_SECTION}] key(s): {', '.join(missing)}."
        )

    port = section.get("db_port")
    try:
        config = DatabaseConfig(
            host=section["db_host"],
            database_name=section["db_name"],
            user=section["db_user"],
            password=section["db_pass"],
            port=DEFAULT_PORT if port is None else port,
        )
    except ValidationError as exc:
        # Report keys only; the offending values may include the password.
        keys = sorted({CONFIG_KEYS.get(str(error["loc"][0]), str(error["loc"][0])) for error in exc.errors()})
        raise ConfigError(
            f"Config file '{path}' has invalid [{CONFIG_SECTION}] value(s) for: {', '.join(keys)}."
        ) from exc

    LOG.debug("Loaded database config", extra={"path": str(path), "dsn": config.dsn})
    return config


def read_config_file(path: str | os.PathLike[str]) -> dict[str, dict[str, IniValue]]:
    """Read and parse an INI file with typed value scanning."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read config file '{path}': {exc}") from exc
    return parse_typed_ini(text, source=str(path))


def parse_typed_ini(text: str, *, source: str = "<string>") -> dict[str, dict[str, IniValue]]:
    """Parse INI text into ``{section: {key: value}}`` with typed values.

    Quoted values stay strings; unquoted booleans, ``null`` and integers are
    converted (see ``scan_value``).
    """

    parser = configparser.ConfigParser(interpolation=None, strict=True)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        parser.read_string(text, source=source)
    except configparser.Error as exc:
        raise ConfigError(f"Could not parse config file '{source}': {exc}") from exc
    return {
        name: {key: scan_value(raw) for key, raw in parser.items(name, raw=True)}
        for name in parser.sections()
    }


def scan_value(raw: str) -> IniValue:
    """Convert a raw INI value to ``str``, ``int``, ``bool`` or ``None``."""

    value = raw.strip()
    if value[:1] in {'"', "'"}:
        end = value.find(value[0], 1)
        trailing = value[end + 1 :].strip() if end != -1 else ""
        # A ``;`` comment may follow the closing quote.
        if end != -1 and (not trailing or trailing.startswith(";")):
            return value[1:end]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    lowered = value.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    if lowered == "null":
        return None
    if _INTEGER.fullmatch(value):
        return int(value)
    return value


__all__ = [
    "CONFIG_SECTION",
    "DEFAULT_PORT",
    "DatabaseConfig",
    "load_config",
    "parse_typed_ini",
    "read_config_file",
    "scan_value",
]
