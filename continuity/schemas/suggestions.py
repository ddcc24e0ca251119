"""
Pydantic schemas for AI assisted activity analysis.
"""
from __future__ import annotations

from pydantic import Field, field_validator

from continuity.schemas.bia import CamelModel, RecoveryPointObjective, RecoveryTimeObjective


class SuggestionRequest(CamelModel):
    activity_name: str = Field(..., max_length=255)
    department: str = Field(..., max_length=255)

    @field_validator("activity_name", "department")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be blank")
        return text


class AIAnalysisResult(CamelModel):
    """Structured suggestion returned by the text generation service."""

    suggested_description: str
    suggested_rto: RecoveryTimeObjective = Field(..., alias="suggestedRTO")
    suggested_rpo: RecoveryPointObjective = Field(..., alias="suggestedRPO")
    impact_narrative: str
    suggested_resources: list[str] = Field(default_factory=list)
