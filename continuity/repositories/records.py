"""
Shared persistence helpers for the record tables.

Every table maps an opaque string id to the JSON payload of one record.
"""
from __future__ import annotations

import json
from typing import Any, Mapping, Sequence, TypeVar

import aiosqlite
from pydantic import BaseModel, ValidationError

from continuity.core.database import db

ModelT = TypeVar("ModelT", bound=BaseModel)

TABLES = ("resources", "activities", "risks", "strategies")

Statement = tuple[str, tuple]


class WriteFailedError(RuntimeError):
    """Raised when a put, delete or batch write could not be committed."""

    def __init__(self, table: str, record_id: str | None, reason: str) -> None:
        self.table = table
        self.record_id = record_id
        self.reason = reason
        target = f"{table}/{record_id}" if record_id else table
        super().__init__(f"Write to {target} failed: {reason}")


class RecordCorruptError(RuntimeError):
    """Raised when a stored payload no longer matches its schema."""


def _check_table(table: str) -> str:
    if table not in TABLES:
        raise ValueError(f"Unknown record table: {table}")
    return table


def serialise(record: BaseModel) -> str:
    return json.dumps(record.model_dump(mode="json", by_alias=True), ensure_ascii=False)


def upsert_statement(
    table: str,
    record: BaseModel,
    extra_columns: Mapping[str, Any] | None = None,
) -> Statement:
    _check_table(table)
    columns = {"id": getattr(record, "id"), **dict(extra_columns or {}), "payload": serialise(record)}
    names = ", ".join(columns)
    placeholders = ", ".join("?" for _ in columns)
    updates = ", ".join(f"{name} = excluded.{name}" for name in columns if name != "id")
    query = f"""
        INSERT INTO {table} ({names})
        VALUES ({placeholders})
        ON CONFLICT(id) DO UPDATE SET {updates}, updated_at = datetime('now')
    """
    return query, tuple(columns.values())


def delete_statement(table: str, record_id: str) -> Statement:
    _check_table(table)
    return f"DELETE FROM {table} WHERE id = ?", (record_id,)


async def list_records(table: str, model: type[ModelT]) -> list[ModelT]:
    """Load every record of a table. Ordering is not guaranteed."""
    _check_table(table)
    rows = await db.fetch_all(f"SELECT id, payload FROM {table}")
    records: list[ModelT] = []
    for row in rows:
        try:
            records.append(model.model_validate(json.loads(row["payload"])))
        except (ValueError, ValidationError) as exc:
            raise RecordCorruptError(
                f"Stored record {table}/{row['id']} is unreadable: {exc}"
            ) from exc
    return records


async def write(table: str, record_id: str | None, statement: Statement) -> None:
    query, params = statement
    try:
        await db.execute(query, params)
    except aiosqlite.Error as exc:
        raise WriteFailedError(table, record_id, str(exc)) from exc


async def write_batch(table: str, statements: Sequence[Statement]) -> None:
    """Commit several statements together; nothing is kept if one fails."""
    if not statements:
        return
    try:
        await db.execute_batch(statements)
    except aiosqlite.Error as exc:
        raise WriteFailedError(table, None, str(exc)) from exc


async def put_record(
    table: str,
    record: BaseModel,
    extra_columns: Mapping[str, Any] | None = None,
) -> None:
    await write(table, getattr(record, "id"), upsert_statement(table, record, extra_columns))


async def delete_record(table: str, record_id: str) -> None:
    """Delete by id. Deleting an id that does not exist is a no-op."""
    await write(table, record_id, delete_statement(table, record_id))
