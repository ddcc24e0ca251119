from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from continuity.api.dependencies.state import StateHolder, get_state_holder
from continuity.schemas.bia import Resource, ResourceCreate
from continuity.services import state as state_service

router = APIRouter(prefix="/api/resources", tags=["Resources"])


@router.get("", response_model=list[Resource])
async def list_resources(holder: StateHolder = Depends(get_state_holder)) -> list[Resource]:
    """List supporting resources (people, IT systems, facilities, equipment, vendors)."""
    return list(holder.state.resources)


@router.post("", response_model=Resource, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Resource:
    return await holder.apply(state_service.create_resource, payload)


@router.put("/{resource_id}", response_model=Resource)
async def update_resource(
    resource_id: str,
    payload: ResourceCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Resource:
    """Replace every field of an existing resource."""
    try:
        return await holder.apply(state_service.update_resource, resource_id, payload)
    except state_service.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource(
    resource_id: str,
    holder: StateHolder = Depends(get_state_holder),
) -> Response:
    """Delete a resource. Activities referencing it keep the dangling id."""
    await holder.apply(state_service.delete_resource, resource_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
