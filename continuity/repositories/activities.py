"""
Repository for business activities.
"""
from __future__ import annotations

from continuity.repositories import records
from continuity.schemas.bia import Activity

TABLE = "activities"


async def list_activities() -> list[Activity]:
    return await records.list_records(TABLE, Activity)


async def save_activity(activity: Activity) -> None:
    """Insert or replace an activity by id."""
    await records.put_record(TABLE, activity)


async def delete_activity(activity_id: str) -> None:
    """Delete an activity. Strategies and risks referencing it are left in place."""
    await records.delete_record(TABLE, activity_id)
