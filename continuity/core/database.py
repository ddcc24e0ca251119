from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Sequence

import aiosqlite
from loguru import logger

from .config import PROJECT_ROOT, get_settings

# Quoted literals, line and block comments, a semicolon, or any other text.
_SQL_TOKEN = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|;"
    r"|[^'\";/-]+"
    r"|.",
    re.DOTALL,
)


class StoreUnavailableError(RuntimeError):
    """Raised when the local store has not been opened or failed to open."""


class Database:
    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._settings = get_settings()

    def _get_sqlite_path(self) -> Path:
        """Get the path to the SQLite database file."""
        return Path(self._settings.database_path).expanduser()

    def _split_sql_statements(self, sql: str) -> list[str]:
        """Split a migration script on semicolons outside literals and comments.

        Comments are dropped; trigger bodies are not supported.
        """
        statements: list[str] = []
        current: list[str] = []
        for token in _SQL_TOKEN.findall(sql):
            if token.startswith(("--", "/*")):
                continue
            if token == ";":
                statements.append("".join(current).strip())
                current = []
            else:
                current.append(token)
        statements.append("".join(current).strip())
        return [statement for statement in statements if statement]

    async def connect(self) -> None:
        if self._conn:
            return

        db_path = self._get_sqlite_path()
        logger.info("Connecting to SQLite database at {path}", path=str(db_path))
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(str(db_path))
        self._conn.row_factory = aiosqlite.Row

    async def disconnect(self) -> None:
        if self._conn:
            logger.info("Disconnecting from SQLite database")
            await self._conn.close()
            self._conn = None

    def is_connected(self) -> bool:
        return self._conn is not None

    def _require_connection(self) -> aiosqlite.Connection:
        if not self._conn:
            raise StoreUnavailableError("SQLite database not initialised")
        return self._conn

    async def execute(self, sql: str, params: tuple | dict | None = None) -> None:
        conn = self._require_connection()
        await conn.execute(sql, params or ())
        await conn.commit()

    async def execute_batch(
        self, statements: Sequence[tuple[str, tuple | dict | None]]
    ) -> None:
        """Run several statements and commit them together.

        Any failure rolls back every statement of the batch before re-raising.
        """
        conn = self._require_connection()
        try:
            for sql, params in statements:
                await conn.execute(sql, params or ())
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise

    async def fetch_one(self, sql: str, params: tuple | dict | None = None):
        conn = self._require_connection()
        cursor = await conn.execute(sql, params or ())
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def fetch_all(self, sql: str, params: tuple | dict | None = None):
        conn = self._require_connection()
        cursor = await conn.execute(sql, params or ())
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    def _get_migrations_dir(self) -> Path:
        return PROJECT_ROOT / "migrations"

    async def _ensure_migrations_table(self, conn: aiosqlite.Connection) -> None:
        """Create migrations tracking table if it doesn't exist."""
        await conn.execute(
            "CREATE TABLE IF NOT EXISTS migrations (name VARCHAR(255) PRIMARY KEY)"
        )
        await conn.commit()

    async def _apply_migration_file(self, conn: aiosqlite.Connection, path: Path) -> None:
        """Apply a migration file to the database."""
        sql = path.read_text(encoding="utf-8")
        try:
            for statement in self._split_sql_statements(sql):
                await conn.execute(statement)
            await conn.execute("INSERT INTO migrations (name) VALUES (?)", (path.name,))
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise

    async def run_migrations(self, paths: Iterable[Path] | None = None) -> None:
        """Run all pending migrations."""
        await self.connect()
        conn = self._require_connection()
        migrations_dir = self._get_migrations_dir()
        if paths is None:
            if not migrations_dir.exists():
                logger.warning("No migrations directory found at {path}", path=str(migrations_dir))
                return
            paths = sorted(migrations_dir.glob("*.sql"))
        else:
            paths = sorted(paths)

        await self._ensure_migrations_table(conn)
        cursor = await conn.execute("SELECT name FROM migrations")
        applied = {dict(row)["name"] for row in await cursor.fetchall()}

        for path in paths:
            if path.name in applied:
                continue
            await self._apply_migration_file(conn, path)
            logger.info("Applied migration {name}", name=path.name)


db = Database()
