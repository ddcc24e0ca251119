"""
Pydantic schemas for dashboard metrics, the risk heatmap and the compliance report.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from continuity.schemas.bia import (
    CamelModel,
    ImpactLevel,
    RecoveryTimeObjective,
    RiskCategory,
    RiskTreatment,
)


class PriorityDistribution(CamelModel):
    """Activity counts per priority bucket."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class RiskHeatmapCell(CamelModel):
    """Schema for a heatmap cell."""

    likelihood: int
    impact: int
    count: int
    score: int
    level: str


class RiskHeatmapResponse(CamelModel):
    """Schema for heatmap response."""

    cells: list[RiskHeatmapCell]
    total: int


class DashboardSummary(CamelModel):
    total_activities: int
    critical_activities: int
    high_risk_count: int
    coverage_percent: int = Field(..., ge=0, le=100)
    readiness_percent: int = Field(..., ge=0, le=100)
    priority_distribution: PriorityDistribution


class CriticalActivityRow(CamelModel):
    """A Critical or High priority activity and its chosen recovery strategy."""

    activity_id: str
    name: str
    department: str
    priority: ImpactLevel
    rto: RecoveryTimeObjective
    selected_strategy: Optional[str] = None
    strategy_rto: Optional[RecoveryTimeObjective] = None


class HighRiskRow(CamelModel):
    risk_id: str
    description: str
    category: RiskCategory
    score: int
    level: str
    treatment: RiskTreatment


class ComplianceReport(CamelModel):
    """Static summary view of the register."""

    generated_at: datetime
    organization_name: str
    standard: str
    total_activities: int
    high_risk_count: int
    coverage_percent: int
    critical_activities: list[CriticalActivityRow]
    high_risks: list[HighRiskRow]
