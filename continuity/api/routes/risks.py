from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from continuity.api.dependencies.state import StateHolder, get_state_holder
from continuity.schemas.bia import Risk, RiskCategory, RiskCreate
from continuity.services import risk_calculator
from continuity.services import state as state_service

router = APIRouter(prefix="/api/risks", tags=["Risk Assessment"])


@router.get("", response_model=list[Risk])
async def list_risks(
    category: Optional[RiskCategory] = Query(None, description="Filter by category"),
    level: Optional[str] = Query(None, description="Filter by level: Low, Medium, High, Critical"),
    heatmap_filter: Optional[str] = Query(None, description="Cell filter as 'likelihood,impact'"),
    holder: StateHolder = Depends(get_state_holder),
) -> list[Risk]:
    risks = list(holder.state.risks)
    if category:
        risks = [r for r in risks if r.category is category]
    if level:
        risks = [r for r in risks if risk_calculator.risk_level(risk_calculator.risk_score(r)) == level]
    if heatmap_filter:
        try:
            likelihood, impact = map(int, heatmap_filter.split(","))
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="heatmap_filter must be 'likelihood,impact'",
            ) from exc
        risks = [r for r in risks if r.likelihood == likelihood and r.impact == impact]
    return risks


@router.post("", response_model=Risk, status_code=status.HTTP_201_CREATED)
async def create_risk(
    payload: RiskCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Risk:
    return await holder.apply(state_service.create_risk, payload)


@router.put("/{risk_id}", response_model=Risk)
async def update_risk(
    risk_id: str,
    payload: RiskCreate,
    holder: StateHolder = Depends(get_state_holder),
) -> Risk:
    try:
        return await holder.apply(state_service.update_risk, risk_id, payload)
    except state_service.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{risk_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_risk(
    risk_id: str,
    holder: StateHolder = Depends(get_state_holder),
) -> Response:
    await holder.apply(state_service.delete_risk, risk_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
