"""
Repository for recovery strategies.
"""
from __future__ import annotations

from typing import Iterable

from continuity.repositories import records
from continuity.schemas.bia import RecoveryStrategy

TABLE = "strategies"


def upsert_statement(strategy: RecoveryStrategy) -> records.Statement:
    return records.upsert_statement(TABLE, strategy, {"activity_id": strategy.activity_id})


async def list_strategies() -> list[RecoveryStrategy]:
    return await records.list_records(TABLE, RecoveryStrategy)


async def save_strategy(strategy: RecoveryStrategy) -> None:
    """Insert or replace a strategy by id."""
    await records.write(TABLE, strategy.id, upsert_statement(strategy))


async def save_strategies(strategies: Iterable[RecoveryStrategy]) -> None:
    """Write several strategies as one batch.

    Used when changing the selected strategy of an activity so readers never
    observe zero or two selections mid-way.
    """
    await records.write_batch(TABLE, [upsert_statement(strategy) for strategy in strategies])


async def delete_strategy(strategy_id: str) -> None:
    await records.delete_record(TABLE, strategy_id)
