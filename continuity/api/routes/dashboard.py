from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from continuity.api.dependencies.state import StateHolder, get_state_holder
from continuity.schemas.bia import BIASettings
from continuity.schemas.reports import ComplianceReport, DashboardSummary, RiskHeatmapResponse
from continuity.services import metrics, report as report_service, risk_calculator

router = APIRouter(tags=["Dashboard"])


@router.get("/api/dashboard", response_model=DashboardSummary)
async def dashboard(holder: StateHolder = Depends(get_state_holder)) -> DashboardSummary:
    """Headline figures: activity counts, high risks, strategy coverage and readiness."""
    state = holder.state
    return metrics.dashboard_summary(state.activities, state.risks, state.strategies)


@router.get("/api/dashboard/heatmap", response_model=RiskHeatmapResponse)
async def risk_heatmap(holder: StateHolder = Depends(get_state_holder)) -> RiskHeatmapResponse:
    return metrics.heatmap(holder.state.risks)


@router.get("/api/dashboard/scales")
async def risk_scales() -> dict[str, Any]:
    """Legend data for the heatmap."""
    return {
        "severity_bands": risk_calculator.get_severity_band_info(),
        "likelihood_scale": risk_calculator.get_likelihood_scale(),
        "impact_scale": risk_calculator.get_impact_scale(),
    }


@router.get("/api/dashboard/report", response_model=ComplianceReport)
async def compliance_report(holder: StateHolder = Depends(get_state_holder)) -> ComplianceReport:
    """
    Compliance summary of the register.

    Lists Critical and High priority activities with their selected recovery
    strategy, and every risk scoring 10 or more.
    """
    state = holder.state
    return report_service.compile_report(
        state.activities,
        state.risks,
        state.strategies,
        report_service.bia_settings(),
    )


@router.get("/api/settings", response_model=BIASettings)
async def assessment_settings() -> BIASettings:
    return report_service.bia_settings()
