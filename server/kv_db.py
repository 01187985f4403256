"""SQLite-backed key/value persistence for the server's stores."""

import sqlite3
from pathlib import Path

from stellarmind.utils.identifiers import utc_timestamp


class SqliteStore:
    """Implements the ``get/put/delete`` persistence protocol on one sqlite table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                create table if not exists kv_store (
                    key text primary key,
                    value blob not null,
                    updated_at text not null
                )
                """
            )
            conn.commit()

    def get(self, key: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute("select value from kv_store where key = ?", (key,)).fetchone()
        return bytes(row["value"]) if row else None

    def put(self, key: str, value: bytes) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                insert into kv_store (key, value, updated_at)
                values (?, ?, ?)
                on conflict(key) do update set
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), utc_timestamp()),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("delete from kv_store where key = ?", (key,))
            conn.commit()
