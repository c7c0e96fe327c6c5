"""Utility that launches a sample MySQL Docker container and writes a zdb config for it."""

from __future__ import annotations

import argparse
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zdb import Database, ZdbError

DEFAULT_CONTAINER = "zdb-sample-db"
DEFAULT_PORT = 3307
DEFAULT_PASSWORD = "zdb"
DEFAULT_DB = "zdb_demo"
DEFAULT_USER = "zdb"
DEFAULT_CONFIG = ROOT / "database.ini"
DOCKER_IMAGE = "mysql:8.4"

SEED_SQL = """
CREATE TABLE IF NOT EXISTS people (
    id INT NOT NULL,
    name TEXT,
    age INT
);
DELETE FROM people;
INSERT INTO people (id, name, age) VALUES
    (1, 'Ann', 30),
    (2, 'Ben', NULL),
    (3, 'Cara', 41),
    (3, 'Cara (duplicate key)', 42);
""".strip()


def run(cmd: list[str], *, check: bool = True, **kwargs) -> subprocess.CompletedProcess[str]:
    print("$", " ".join(cmd))
    return subprocess.run(cmd, check=check, text=True, **kwargs)


def container_exists(name: str) -> bool:
    result = subprocess.run(
        ["docker", "ps", "-a", "--filter", f"name={name}", "--format", "{{.ID}}"],
        text=True,
        capture_output=True,
    )
    return bool(result.stdout.strip())


def start_container(name: str, port: int, password: str, database: str, user: str) -> None:
    if container_exists(name):
        print(f"Container '{name}' already exists. Reusing it.")
        run(["docker", "start", name], check=False)
    else:
        run(
            [
                "docker",
                "run",
                "-d",
                "--name",
                name,
                "-e",
                f"MYSQL_ROOT_PASSWORD={password}",
                "-e",
                f"MYSQL_DATABASE={database}",
                "-e",
                f"MYSQL_USER={user}",
                "-e",
                f"MYSQL_PASSWORD={password}",
                "-p",
                f"{port}:3306",
                DOCKER_IMAGE,
            ]
        )
    wait_for_start(name, user, password)


def wait_for_start(name: str, user: str, password: str, retries: int = 30, delay: float = 1.0) -> None:
    for _ in range(retries):
        result = subprocess.run(
            ["docker", "exec", name, "mysqladmin", "ping", "-u", user, f"-p{password}", "--silent"],
            text=True,
            capture_output=True,
        )
        if result.returncode == 0:
            return
        time.sleep(delay)
    print("Warning: database did not report ready state; continuing anyway.")


def seed_data(name: str, database: str, user: str, password: str) -> None:
    run(
        ["docker", "exec", "-i", name, "mysql", "-u", user, f"-p{password}", database],
        input=SEED_SQL,
    )


def render_config_text(host: str, port: int, database: str, user: str, password: str) -> str:
    """Render a ``[database]`` INI section readable by ``zdb.load_config``."""

    lines = [
        "[database]",
        f'db_host = "{host}"',
        f"db_port = {port}",
        f'db_name = "{database}"',
        f'db_user = "{user}"',
        f'db_pass = "{password}"',
    ]
    return "\n".join(lines) + "\n"


def write_config(path: Path, text: str) -> bool:
    """Write ``text`` to ``path`` unless a config already exists there."""

    if path.exists():
        print(f"Config '{path}' already present; leaving as-is.")
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    print(f"Wrote sample config to {path}.")
    return True


def check_config(path: Path) -> int:
    """Open a handle from ``path`` and print one sample lookup."""

    try:
        with Database(path) as db:
            value = db.get_column_value(["name", "age"], "people", "id", 1)
    except ZdbError as exc:
        print(f"Sample lookup failed: {exc} (code={exc.code})")
        return 1
    print(f"people[id=1] -> {value}")
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--container", default=DEFAULT_CONTAINER, help="Docker container name")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Host port to expose MySQL on")
    parser.add_argument("--password", default=DEFAULT_PASSWORD, help="MySQL password")
    parser.add_argument("--database", default=DEFAULT_DB, help="Database name to create")
    parser.add_argument("--user", default=DEFAULT_USER, help="Database user")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="INI file to write")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        start_container(args.container, args.port, args.password, args.database, args.user)
        seed_data(args.container, args.database, args.user, args.password)
    except FileNotFoundError:
        print("Docker is not installed or not on PATH.")
        return 1
    write_config(
        args.config,
        render_config_text("127.0.0.1", args.port, args.database, args.user, args.password),
    )
    return check_config(args.config)


if __name__ == "__main__":
    raise SystemExit(main())
