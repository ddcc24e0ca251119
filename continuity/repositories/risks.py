"""
Repository for risk register entries.
"""
from __future__ import annotations

from continuity.repositories import records
from continuity.schemas.bia import Risk

TABLE = "risks"


async def list_risks() -> list[Risk]:
    return await records.list_records(TABLE, Risk)


async def save_risk(risk: Risk) -> None:
    """Insert or replace a risk by id."""
    await records.put_record(TABLE, risk)


async def delete_risk(risk_id: str) -> None:
    await records.delete_record(TABLE, risk_id)
