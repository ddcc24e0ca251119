"""
Risk scoring for the risk register.

Score is likelihood × impact on two 1-5 scales, giving 1-25. Levels:

* Low: score below 5
* Medium: 5 to 9
* High: 10 to 14
* Critical: 15 and above
"""
from __future__ import annotations

from typing import Any, Iterable

from continuity.schemas.bia import Risk

SCALE_MIN = 1
SCALE_MAX = 5

# Lower bound of each band, most severe first.
_LEVEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (15, "Critical"),
    (10, "High"),
    (5, "Medium"),
)

LEVELS = ("Low", "Medium", "High", "Critical")

HIGH_RISK_THRESHOLD = 10


def risk_score(risk: Risk) -> int:
    return risk.likelihood * risk.impact


def risk_level(score: int) -> str:
    for threshold, level in _LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "Low"


def calculate_risk(likelihood: int, impact: int) -> tuple[int, str]:
    """Return ``(score, level)`` for a likelihood/impact pair."""
    for name, value in (("likelihood", likelihood), ("impact", impact)):
        if not SCALE_MIN <= value <= SCALE_MAX:
            raise ValueError(f"{name} must be between {SCALE_MIN} and {SCALE_MAX}, got {value}")
    score = likelihood * impact
    return score, risk_level(score)


def is_high_risk(risk: Risk) -> bool:
    return risk_score(risk) >= HIGH_RISK_THRESHOLD


def get_severity_band_info() -> list[dict[str, Any]]:
    """Describe each level band for heatmap legends."""
    return [
        {"level": "Low", "min_score": 1, "max_score": 4, "color": "green"},
        {"level": "Medium", "min_score": 5, "max_score": 9, "color": "yellow"},
        {"level": "High", "min_score": 10, "max_score": 14, "color": "orange"},
        {"level": "Critical", "min_score": 15, "max_score": 25, "color": "red"},
    ]


def get_likelihood_scale() -> list[dict[str, Any]]:
    return [
        {"value": 1, "label": "Rare"},
        {"value": 2, "label": "Unlikely"},
        {"value": 3, "label": "Possible"},
        {"value": 4, "label": "Likely"},
        {"value": 5, "label": "Almost Certain"},
    ]


def get_impact_scale() -> list[dict[str, Any]]:
    return [
        {"value": 1, "label": "Negligible"},
        {"value": 2, "label": "Minor"},
        {"value": 3, "label": "Moderate"},
        {"value": 4, "label": "Major"},
        {"value": 5, "label": "Catastrophic"},
    ]


def risk_heatmap(risks: Iterable[Risk]) -> dict[tuple[int, int], int]:
    """Count risks per (likelihood, impact) cell of the 5×5 grid.

    Every cell is present, empty cells count zero.
    """
    grid = {
        (likelihood, impact): 0
        for likelihood in range(SCALE_MIN, SCALE_MAX + 1)
        for impact in range(SCALE_MIN, SCALE_MAX + 1)
    }
    for risk in risks:
        grid[(risk.likelihood, risk.impact)] += 1
    return grid
