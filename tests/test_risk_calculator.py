"""
Risk scoring boundaries.

Levels: Low (1-4), Medium (5-9), High (10-14), Critical (15-25).
"""
import pytest

from continuity.schemas.bia import Risk, RiskCategory
from continuity.services.risk_calculator import (
    LEVELS,
    calculate_risk,
    get_impact_scale,
    get_likelihood_scale,
    get_severity_band_info,
    is_high_risk,
    risk_heatmap,
    risk_level,
    risk_score,
)


def _risk(likelihood, impact, risk_id="r1"):
    return Risk(
        id=risk_id,
        description="Flooding of the ground floor",
        category=RiskCategory.PHYSICAL,
        likelihood=likelihood,
        impact=impact,
    )


class TestRiskCalculationBoundaries:
    def test_examples(self):
        assert calculate_risk(3, 5) == (15, "Critical")
        assert calculate_risk(2, 2) == (4, "Low")

    def test_band_lower_bounds_are_inclusive(self):
        assert risk_level(4) == "Low"
        assert risk_level(5) == "Medium"
        assert risk_level(9) == "Medium"
        assert risk_level(10) == "High"
        assert risk_level(14) == "High"
        assert risk_level(15) == "Critical"
        assert risk_level(25) == "Critical"

    def test_level_is_monotonic_in_score(self):
        ranks = []
        for likelihood in range(1, 6):
            for impact in range(1, 6):
                score = risk_score(_risk(likelihood, impact))
                ranks.append((score, LEVELS.index(risk_level(score))))
        ranks.sort()
        assert all(a[1] <= b[1] for a, b in zip(ranks, ranks[1:]))
        assert {LEVELS[rank] for _, rank in ranks} == set(LEVELS)

    @pytest.mark.parametrize("likelihood,impact", [(0, 3), (6, 1), (3, 0), (2, 6)])
    def test_out_of_scale_values_rejected(self, likelihood, impact):
        with pytest.raises(ValueError):
            calculate_risk(likelihood, impact)

    def test_high_risk_threshold(self):
        assert is_high_risk(_risk(2, 5))
        assert not is_high_risk(_risk(3, 3))


def test_heatmap_has_every_cell_and_counts_risks():
    risks = [_risk(3, 5, "a"), _risk(3, 5, "b"), _risk(1, 1, "c")]
    grid = risk_heatmap(risks)

    assert len(grid) == 25
    assert grid[(3, 5)] == 2
    assert grid[(1, 1)] == 1
    assert sum(grid.values()) == len(risks)


def test_legend_scales():
    bands = get_severity_band_info()
    assert [band["level"] for band in bands] == list(LEVELS)
    assert bands[0]["min_score"] == 1 and bands[-1]["max_score"] == 25
    assert get_likelihood_scale()[-1]["label"] == "Almost Certain"
    assert get_impact_scale()[0]["label"] == "Negligible"
