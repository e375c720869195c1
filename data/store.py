from __future__ import annotations

import json
import sqlite3
import time
from pathlib import Path
from typing import Any

import psycopg
from psycopg.rows import dict_row


_COLUMNS = (
    ("type", "type"),
    ("symbol", "symbol"),
    ("tokenAddress", "token_address"),
    ("amount", "amount"),
    ("pricePerToken", "price_per_token"),
    ("txHash", "tx_hash"),
    ("value", "value"),
    ("timestamp", "timestamp"),
)


def _row_to_record(row: dict[str, Any]) -> dict[str, Any]:
    record = {key: row[column] for key, column in _COLUMNS}
    record["id"] = str(row["id"])
    return record


def _record_values(record: dict[str, Any]) -> tuple:
    return tuple(record.get(key) for key, _ in _COLUMNS)


class BaseStore:
    """Trade collection plus small key/value tables.

    Trade records are flat mappings (``type``, ``symbol``, ``tokenAddress``,
    ``amount``, ``pricePerToken``, ``txHash``, ``value``, ``timestamp``). Records
    are insert-only.
    """

    def add_trade(self, record: dict[str, Any]) -> str:
        raise NotImplementedError

    def list_trades(self, limit: int | None = None) -> list[dict[str, Any]]:
        raise NotImplementedError

    def set_setting(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def get_setting(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set_credentials(self, provider: str, data_encrypted: str) -> None:
        raise NotImplementedError

    def get_credentials(self, provider: str) -> str | None:
        raise NotImplementedError


class SQLiteStore(BaseStore):
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).with_name("schema.sql")
        with self._connect() as conn:
            conn.executescript(schema_path.read_text())

    def add_trade(self, record: dict[str, Any]) -> str:
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO trades (type, symbol, token_address, amount, price_per_token, tx_hash, value, timestamp) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                _record_values(record),
            )
            return str(cur.lastrowid)

    def list_trades(self, limit: int | None = None) -> list[dict[str, Any]]:
        with self._connect() as conn:
            if limit is None:
                rows = conn.execute("SELECT * FROM trades ORDER BY timestamp DESC, id DESC").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM trades ORDER BY timestamp DESC, id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
            return [_row_to_record(dict(r)) for r in rows]

    def set_setting(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, json.dumps(value)),
            )

    def get_setting(self, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key=?", (key,)).fetchone()
            if not row:
                return default
            return json.loads(row["value"])

    def set_credentials(self, provider: str, data_encrypted: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO credentials (provider, data_encrypted, created_at, updated_at) "
                "VALUES (?, ?, ?, ?) ON CONFLICT(provider) DO UPDATE SET data_encrypted=excluded.data_encrypted, updated_at=excluded.updated_at",
                (provider, data_encrypted, int(time.time()), int(time.time())),
            )

    def get_credentials(self, provider: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data_encrypted FROM credentials WHERE provider=?",
                (provider,),
            ).fetchone()
            return row["data_encrypted"] if row else None


class PostgresStore(BaseStore):
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn
        self._ensure_schema()

    def _connect(self):
        return psycopg.connect(self.dsn, row_factory=dict_row)

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).with_name("schema_pg.sql")
        with self._connect() as conn:
            statements = [s.strip() for s in schema_path.read_text().split(";") if s.strip()]
            for stmt in statements:
                conn.execute(stmt)

    def add_trade(self, record: dict[str, Any]) -> str:
        with self._connect() as conn:
            row = conn.execute(
                "INSERT INTO trades (type, symbol, token_address, amount, price_per_token, tx_hash, value, timestamp) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, %s) RETURNING id",
                _record_values(record),
            ).fetchone()
            return str(row["id"])

    def list_trades(self, limit: int | None = None) -> list[dict[str, Any]]:
        with self._connect() as conn:
            if limit is None:
                rows = conn.execute("SELECT * FROM trades ORDER BY timestamp DESC, id DESC").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM trades ORDER BY timestamp DESC, id DESC LIMIT %s",
                    (limit,),
                ).fetchall()
            return [_row_to_record(dict(r)) for r in rows]

    def set_setting(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO settings (key, value) VALUES (%s, %s) "
                "ON CONFLICT (key) DO UPDATE SET value=excluded.value",
                (key, json.dumps(value)),
            )

    def get_setting(self, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key=%s", (key,)).fetchone()
            if not row:
                return default
            return json.loads(row["value"])

    def set_credentials(self, provider: str, data_encrypted: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO credentials (provider, data_encrypted, created_at, updated_at) "
                "VALUES (%s, %s, %s, %s) ON CONFLICT (provider) DO UPDATE SET data_encrypted=excluded.data_encrypted, updated_at=excluded.updated_at",
                (provider, data_encrypted, int(time.time()), int(time.time())),
            )

    def get_credentials(self, provider: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data_encrypted FROM credentials WHERE provider=%s",
                (provider,),
            ).fetchone()
            return row["data_encrypted"] if row else None


def create_store(database_url: str | None, sqlite_path: str) -> BaseStore:
    if database_url:
        return PostgresStore(database_url)
    return SQLiteStore(sqlite_path)
