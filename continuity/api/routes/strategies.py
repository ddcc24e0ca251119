from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from continuity.api.dependencies.state import StateHolder, get_state_holder
from continuity.schemas.bia import RecoveryStrategy, RecoveryStrategyCreate
from continuity.services import state as state_service

router = APIRouter(prefix="/api/strategies", tags=["Recovery Strategies"])


@router.get("", response_model=list[RecoveryStrategy])
async def list_strategies(
    activity_id: Optional[str] = Query(None, alias="activityId", description="Filter by activity"),
    holder: StateHolder = Depends(get_state_holder),
) -> list[RecoveryStrategy]:
    if activity_id:
        return list(holder.state.strategies_for(activity_id))
    return list(holder.state.strategies)


@router.post("", response_model=RecoveryStrategy, status_code=status.HTTP_201_CREATED)
async def create_strategy(
    payload: RecoveryStrategyCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> RecoveryStrategy:
    """Add a candidate strategy. New strategies start unselected."""
    return await holder.apply(state_service.create_strategy, payload)


@router.put("/{strategy_id}", response_model=RecoveryStrategy)
async def update_strategy(
    strategy_id: str,
    payload: RecoveryStrategyCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> RecoveryStrategy:
    """
    Replace the fields of a strategy.

    The selection flag is not part of the payload: a selected strategy stays
    selected unless it is moved to a different activity.
    """
    try:
        return await holder.apply(state_service.update_strategy, strategy_id, payload)
    except state_service.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{strategy_id}/select", response_model=list[RecoveryStrategy])
async def select_strategy(
    strategy_id: str,
    holder: StateHolder = Depends(get_state_holder),
) -> list[RecoveryStrategy]:
    """Select a strategy for its activity and return that activity's strategies."""
    try:
        await holder.apply(state_service.select_strategy, strategy_id)
    except state_service.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    selected = state_service.find(holder.state.strategies, strategy_id)
    return list(holder.state.strategies_for(selected.activity_id))


@router.delete("/{strategy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_strategy(
    strategy_id: str,
    holder: StateHolder = Depends(get_state_holder),
) -> Response:
    await holder.apply(state_service.delete_strategy, strategy_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
