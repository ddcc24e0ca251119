from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from continuity.schemas.suggestions import AIAnalysisResult, SuggestionRequest
from continuity.services import suggestions as suggestions_service

router = APIRouter(prefix="/api/suggestions", tags=["AI Suggestions"])


@router.post(
    "/activity",
    response_model=AIAnalysisResult,
    responses={204: {"description": "No suggestion available (service not configured)"}},
)
async def suggest_activity_analysis(payload: SuggestionRequest):
    """
    Draft a description, RTO, RPO, impact narrative and resource list for an activity.

    Nothing is saved; the caller decides which suggested values to apply.
    Runs outside the register write lock.
    """
    try:
        result = await suggestions_service.generate_bia_analysis(
            payload.activity_name, payload.department
        )
    except suggestions_service.SuggestionFailedError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return result
