"""
Repository for supporting resources.
"""
from __future__ import annotations

from continuity.repositories import records
from continuity.schemas.bia import Resource

TABLE = "resources"


async def list_resources() -> list[Resource]:
    return await records.list_records(TABLE, Resource)


async def save_resource(resource: Resource) -> None:
    """Insert or replace a resource by id."""
    await records.put_record(TABLE, resource)


async def delete_resource(resource_id: str) -> None:
    await records.delete_record(TABLE, resource_id)
