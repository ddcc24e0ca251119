from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from continuity.schemas.bia import Activity, ImpactLevel, RecoveryStrategy, Risk
from continuity.schemas.reports import (
    DashboardSummary,
    PriorityDistribution,
    RiskHeatmapCell,
    RiskHeatmapResponse,
)
from continuity.services import risk_calculator

ACTIVITY_WEIGHT = 40
RISK_WEIGHT = 30
STRATEGY_WEIGHT = 30


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def priority_distribution(activities: Sequence[Activity]) -> PriorityDistribution:
    """Bucket activities by priority.

    Catastrophic counts as Critical; Negligible and Low share the Low bucket.
    """
    counts = {"critical": 0, "high": 0, "medium": 0, "low": 0}
    for activity in activities:
        if activity.priority in (ImpactLevel.CRITICAL, ImpactLevel.CATASTROPHIC):
            counts["critical"] += 1
        elif activity.priority is ImpactLevel.HIGH:
            counts["high"] += 1
        elif activity.priority is ImpactLevel.MEDIUM:
            counts["medium"] += 1
        else:
            counts["low"] += 1
    return PriorityDistribution(**counts)


def selected_strategy_for(
    activity_id: str, strategies: Sequence[RecoveryStrategy]
) -> RecoveryStrategy | None:
    for strategy in strategies:
        if strategy.activity_id == activity_id and strategy.is_selected:
            return strategy
    return None


def strategy_coverage(
    activities: Sequence[Activity], strategies: Sequence[RecoveryStrategy]
) -> int:
    """Percentage of activities with a selected strategy, rounded half up.

    Selected strategies pointing at activities not in ``activities`` are
    ignored on purpose, unlike a plain count of selected activity ids: after
    an activity is deleted its orphaned selection would otherwise still count
    and could push the figure above 100.
    """
    activity_ids = {activity.id for activity in activities}
    covered = {
        strategy.activity_id
        for strategy in strategies
        if strategy.is_selected and strategy.activity_id in activity_ids
    }
    denominator = max(1, len(activities))
    return _round_half_up(Decimal(len(covered) * 100) / Decimal(denominator))


def readiness_score(
    activities: Sequence[Activity],
    risks: Sequence[Risk],
    strategies: Sequence[RecoveryStrategy],
) -> int:
    """Coarse completeness indicator: 40/30/30 for having any activity, risk, selection."""
    score = 0
    if activities:
        score += ACTIVITY_WEIGHT
    if risks:
        score += RISK_WEIGHT
    if any(strategy.is_selected for strategy in strategies):
        score += STRATEGY_WEIGHT
    return min(100, score)


def heatmap(risks: Sequence[Risk]) -> RiskHeatmapResponse:
    cells = []
    for (likelihood, impact), count in sorted(risk_calculator.risk_heatmap(risks).items()):
        score, level = risk_calculator.calculate_risk(likelihood, impact)
        cells.append(
            RiskHeatmapCell(
                likelihood=likelihood,
                impact=impact,
                count=count,
                score=score,
                level=level,
            )
        )
    return RiskHeatmapResponse(cells=cells, total=len(risks))


def dashboard_summary(
    activities: Sequence[Activity],
    risks: Sequence[Risk],
    strategies: Sequence[RecoveryStrategy],
) -> DashboardSummary:
    return DashboardSummary(
        total_activities=len(activities),
        critical_activities=sum(
            1 for activity in activities if activity.priority is ImpactLevel.CRITICAL
        ),
        high_risk_count=sum(1 for risk in risks if risk_calculator.is_high_risk(risk)),
        coverage_percent=strategy_coverage(activities, strategies),
        readiness_percent=readiness_score(activities, risks, strategies),
        priority_distribution=priority_distribution(activities),
    )
