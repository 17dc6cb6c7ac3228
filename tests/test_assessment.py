# tests/test_assessment.py
import pytest

from conftest import NOW
from student_insights.core.scoring import DEFAULT_SCORING
from student_insights.domain.entities.records import SocialEmotionalProfile, TalentProfile
from student_insights.domain.entities.risk import RiskLevel
from student_insights.domain.services.factor_explainer import identify_protective_factors
from student_insights.domain.services.insights_service import build_assessment


def test_regression_fixture(regression_context):
    assessment = build_assessment(regression_context, NOW)
    scores = assessment.factor_scores

    # rising grades add no trend risk: only the base term remains
    assert scores.academic == pytest.approx((100 - 428 / 6) / 100 * 0.7)
    # two MEDIUM incidents
    assert scores.behavioral == pytest.approx(2 / 10 * 0.6 + 0.6 * 0.4)
    assert scores.attendance == 0.0
    assert scores.social_emotional == 0.5
    assert scores.family_support == 0.5
    assert scores.peer_relations == 0.5
    assert scores.motivation == 0.5
    assert scores.health == 0.0

    expected = sum(getattr(scores, key) * w for key, w in DEFAULT_SCORING.weights.items())
    assert assessment.overall_score == pytest.approx(expected)
    assert assessment.overall_score == pytest.approx(0.2871667, abs=1e-6)
    assert assessment.risk_level == RiskLevel.MEDIUM
    assert assessment.confidence == pytest.approx(25.0)
    assert assessment.key_risk_factors == []
    assert assessment.protective_factors == []


def test_assessment_is_deterministic_for_a_fixed_instant(regression_context):
    first = build_assessment(regression_context, NOW)
    second = build_assessment(regression_context, NOW)

    assert first == second


def test_predictive_indicators_present_by_default(regression_context):
    indicators = build_assessment(regression_context, NOW).predictive_indicators

    assert indicators is not None
    assert indicators.short_term.horizon == "next_week"
    assert indicators.medium_term.horizon == "next_month"
    assert indicators.long_term.horizon == "next_semester"


def test_predictions_can_be_skipped(regression_context):
    assert build_assessment(regression_context, NOW, with_predictions=False).predictive_indicators is None


def test_protective_factors():
    talents = TalentProfile(assessed_at=NOW.date(), creative_talents=["music", "drama"], physical_talents=[])
    profile = SocialEmotionalProfile(assessed_at=NOW.date(), leadership_level=5, empathy_level=3)

    factors = identify_protective_factors(talents, profile)

    assert [(f.factor, f.strength) for f in factors] == [("Creative Talents", 8), ("Leadership", 10)]
    assert factors[0].description == "Talented in music, drama"
