# student_insights/domain/services/risk_aggregator.py
from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.risk import FactorScores, RiskLevel
from student_insights.domain.services.factor_scores import clamp


def weighted_score(scores: FactorScores, config: ScoringConfig = DEFAULT_SCORING) -> float:
    values = scores.as_dict()
    total = sum(values[key] * weight for key, weight in config.weights.items())
    return clamp(total)


def determine_risk_level(score: float, config: ScoringConfig = DEFAULT_SCORING) -> RiskLevel:
    levels = config.levels
    if score < levels.low:
        return RiskLevel.LOW
    if score < levels.medium:
        return RiskLevel.MEDIUM
    if score < levels.high:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def calculate_confidence(populated_domains: int, config: ScoringConfig = DEFAULT_SCORING) -> float:
    """Share of the scoring sources with data, as a percentage."""
    populated = max(0, min(populated_domains, config.confidence_domains))
    return populated / config.confidence_domains * 100
