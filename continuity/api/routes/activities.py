from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from continuity.api.dependencies.state import StateHolder, get_state_holder
from continuity.schemas.bia import Activity, ActivityCreate, ImpactLevel
from continuity.services import state as state_service

router = APIRouter(prefix="/api/activities", tags=["Business Impact Analysis"])


@router.get("", response_model=list[Activity])
async def list_activities(
    department: Optional[str] = Query(None, description="Filter by department"),
    priority: Optional[ImpactLevel] = Query(None, description="Filter by priority"),
    holder: StateHolder = Depends(get_state_holder),
) -> list[Activity]:
    """
    List business activities.

    **Query Parameters:**
    - `department`: exact department name
    - `priority`: one of Negligible, Low, Medium, High, Critical, Catastrophic
    """
    activities = list(holder.state.activities)
    if department:
        activities = [a for a in activities if a.department == department]
    if priority:
        activities = [a for a in activities if a.priority is priority]
    return activities


@router.post("", response_model=Activity, status_code=status.HTTP_201_CREATED)
async def create_activity(
    payload: ActivityCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Activity:
    return await holder.apply(state_service.create_activity, payload)


@router.put("/{activity_id}", response_model=Activity)
async def update_activity(
    activity_id: str,
    payload: ActivityCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Activity:
    try:
        return await holder.apply(state_service.update_activity, activity_id, payload)
    except state_service.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    activity_id: str,
    holder: StateHolder = Depends(get_state_holder),
) -> Response:
    """Delete an activity. Its strategies and risk links are not removed."""
    await holder.apply(state_service.delete_activity, activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
