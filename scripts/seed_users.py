"""
Schema and sample-data script for Axion development databases.

Creates a `users` table suited to the configured driver and fills it with
deterministic pseudo-random rows through Axion's own insert path.
"""

from __future__ import annotations

import random
import time

import typer

from axion.config import get_settings
from axion.infrastructure.db_factory import Connection, build_dsn, connect
from axion.query import executor

app = typer.Typer(help="Create and seed the users table.")

USERS_TABLE = "users"

_ID_COLUMN = {
    "sqlite": "id INTEGER PRIMARY KEY AUTOINCREMENT",
    "mysql": "id INT AUTO_INCREMENT PRIMARY KEY",
    "pgsql": "id SERIAL PRIMARY KEY",
}

_USER_COLUMNS = (
    "name VARCHAR(255) NOT NULL",
    "email VARCHAR(255)",
    "role VARCHAR(50) NOT NULL DEFAULT 'member'",
    "age INTEGER",
    "email_verified INTEGER NOT NULL DEFAULT 0",
    "bio VARCHAR(255)",
    "created_at VARCHAR(19)",
    "updated_at VARCHAR(19)",
)

ROLES = ["member", "member", "member", "editor", "admin"]


def _create_users_table(connection: Connection, drop: bool = False) -> None:
    if drop:
        connection.execute(f"DROP TABLE IF EXISTS {USERS_TABLE}", table=USERS_TABLE, operation="drop")
    columns = ", ".join((_ID_COLUMN[connection.driver.name],) + _USER_COLUMNS)
    connection.execute(
        f"CREATE TABLE IF NOT EXISTS {USERS_TABLE} ({columns})",
        table=USERS_TABLE,
        operation="create",
    )


def _user_rows(rows: int, seed: int) -> list[dict]:
    rng = random.Random(seed)
    now = time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime())
    return [
        {
            "name": f"user{i:04d}",
            "email": f"user{i:04d}@example.com",
            "role": rng.choice(ROLES),
            "age": rng.randint(13, 80),
            "email_verified": rng.choice([0, 1]),
            "created_at": now,
            "updated_at": now,
        }
        for i in range(1, rows + 1)
    ]


def _seed_users(connection: Connection, rows: int, seed: int = 42) -> int:
    for row in _user_rows(rows, seed):
        executor.insert(connection, USERS_TABLE, row, integer_columns={"age", "email_verified"})
    return rows


@app.command()
def main(
    rows: int = typer.Option(25, "--rows", "-r", help="Number of users to insert."),
    seed: int = typer.Option(42, "--seed", help="Random seed for reproducible data."),
    drop: bool = typer.Option(False, "--drop", help="Drop the table before creating it."),
) -> None:
    settings = get_settings()
    start = time.perf_counter()
    with connect(settings) as conn:
        _create_users_table(conn, drop=drop)
        inserted = _seed_users(conn, rows, seed)
    typer.echo(
        f"Seeded {inserted} users into {build_dsn(settings)} in {time.perf_counter() - start:.2f}s"
    )


if __name__ == "__main__":
    app()
