"""
Compliance report compilation.

The report is a presentation transform over the current register and is
never persisted.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from continuity.core.config import Settings, get_settings
from continuity.schemas.bia import Activity, BIASettings, ImpactLevel, RecoveryStrategy, Risk
from continuity.schemas.reports import ComplianceReport, CriticalActivityRow, HighRiskRow
from continuity.services import metrics, risk_calculator

REPORTED_PRIORITIES = (ImpactLevel.CRITICAL, ImpactLevel.HIGH)


def bia_settings(settings: Settings | None = None) -> BIASettings:
    """Assessment parameters shown on the report header."""
    settings = settings or get_settings()
    return BIASettings(
        organization_name=settings.organization_name,
        standard=settings.assessment_standard,
        currency=settings.reporting_currency,
        review_cycle_months=settings.review_cycle_months,
    )


def _critical_rows(
    activities: Sequence[Activity], strategies: Sequence[RecoveryStrategy]
) -> list[CriticalActivityRow]:
    rows = []
    for activity in activities:
        if activity.priority not in REPORTED_PRIORITIES:
            continue
        strategy = metrics.selected_strategy_for(activity.id, strategies)
        rows.append(
            CriticalActivityRow(
                activity_id=activity.id,
                name=activity.name,
                department=activity.department,
                priority=activity.priority,
                rto=activity.rto,
                selected_strategy=strategy.name if strategy else None,
                strategy_rto=strategy.rto_achievable if strategy else None,
            )
        )
    return rows


def _high_risk_rows(risks: Sequence[Risk]) -> list[HighRiskRow]:
    rows = []
    for risk in risks:
        score = risk_calculator.risk_score(risk)
        if score < risk_calculator.HIGH_RISK_THRESHOLD:
            continue
        rows.append(
            HighRiskRow(
                risk_id=risk.id,
                description=risk.description,
                category=risk.category,
                score=score,
                level=risk_calculator.risk_level(score),
                treatment=risk.treatment,
            )
        )
    return rows


def compile_report(
    activities: Sequence[Activity],
    risks: Sequence[Risk],
    strategies: Sequence[RecoveryStrategy],
    settings: BIASettings,
    *,
    generated_at: datetime | None = None,
) -> ComplianceReport:
    """Build the compliance report from the current register.

    Rows keep the order of the input collections; the inputs are not modified.
    """
    high_risks = _high_risk_rows(risks)
    return ComplianceReport(
        generated_at=generated_at or datetime.now(timezone.utc),
        organization_name=settings.organization_name,
        standard=settings.standard,
        total_activities=len(activities),
        high_risk_count=len(high_risks),
        coverage_percent=metrics.strategy_coverage(activities, strategies),
        critical_activities=_critical_rows(activities, strategies),
        high_risks=high_risks,
    )
