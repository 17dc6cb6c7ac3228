# student_insights/domain/services/trend_service.py
"""
Risk trend classification over past aggregate scores and the short, medium and
long horizon forecasts built on top of it.

Sign convention: a rising risk score is bad, so a positive ``trend_percentage``
(recent scores above earlier ones) is classified as DECLINING.
"""
import math
from typing import List, Optional

import numpy as np

from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.insight import InsightSeverity, PatternInsight
from student_insights.domain.entities.records import RiskHistoryEntry
from student_insights.domain.entities.risk import (
    FactorScores,
    Forecast,
    PredictiveIndicators,
    TrendDirection,
)
from student_insights.domain.entities.trend import HistoricalScore, TrendAnalysis, TrendPredictions
from student_insights.domain.services.factor_scores import clamp
from student_insights.domain.services.risk_aggregator import determine_risk_level

LONG_TERM_ACTIONS = [
    "Build a comprehensive support plan",
    "Consider family counseling",
    "Enroll in a social-emotional learning program",
    "Track progress regularly",
]

MEDIUM_TERM_ACTIONS = {
    "behavioral": "Start a behavior support program",
    "attendance": "Plan attendance follow-up and a family meeting",
    "academic": "Prepare academic support and an individual study plan",
}


def _predictions(base: float, trend_percentage: float, config: ScoringConfig) -> TrendPredictions:
    factors = config.trend.horizon_factors
    return TrendPredictions(
        **{
            horizon: clamp(base * (1 + trend_percentage / 100 * k))
            for horizon, k in factors.items()
        }
    )


def analyze_trend(
    student_id: str,
    history: List[RiskHistoryEntry],
    current_score: Optional[float] = None,
    config: ScoringConfig = DEFAULT_SCORING,
) -> TrendAnalysis:
    entries = sorted(history, key=lambda h: h.assessed_at, reverse=True)[: config.windows.history_limit]
    historical = [HistoricalScore(date=h.assessed_at, score=h.overall_score, level=h.risk_level) for h in entries]

    if len(entries) < 2:
        if current_score is None:
            current_score = entries[0].overall_score if entries else 0.0
        flat = clamp(current_score)
        return TrendAnalysis(
            student_id=student_id,
            trend=TrendDirection.STABLE,
            trend_percentage=0.0,
            volatility_index=0.0,
            predictions=TrendPredictions(next_7_days=flat, next_30_days=flat, next_90_days=flat),
            historical_scores=historical,
        )

    scores = np.array([h.overall_score for h in entries], dtype=float)
    split = math.ceil(len(scores) / 2)
    recent_avg = float(scores[:split].mean())
    earlier_avg = float(scores[split:].mean())

    trend_percentage = (recent_avg - earlier_avg) / earlier_avg * 100 if earlier_avg else 0.0

    cfg = config.trend
    if trend_percentage > cfg.change_threshold:
        trend = TrendDirection.DECLINING
    elif trend_percentage < -cfg.change_threshold:
        trend = TrendDirection.IMPROVING
    else:
        trend = TrendDirection.STABLE

    # population variance
    variance = float(np.var(scores))
    volatility_index = variance if variance > cfg.variance_floor else 0.0
    if volatility_index > cfg.volatile_above:
        trend = TrendDirection.VOLATILE

    return TrendAnalysis(
        student_id=student_id,
        trend=trend,
        trend_percentage=trend_percentage,
        volatility_index=volatility_index,
        predictions=_predictions(recent_avg, trend_percentage, config),
        historical_scores=historical,
    )


# ==========================================================
#  PREDICTIVE INDICATORS
# ==========================================================

def _forecast(horizon: str, summary: str, score: float, actions: List[str], config: ScoringConfig) -> Forecast:
    score = clamp(score)
    level = determine_risk_level(score, config)
    return Forecast(
        horizon=horizon,
        summary=summary.format(level=level.value),
        predicted_score=score,
        predicted_level=level,
        probability=round(score * 100),
        suggested_actions=actions,
    )


def predict_short_term(
    current_score: float,
    trend: TrendAnalysis,
    insights: List[PatternInsight],
    config: ScoringConfig = DEFAULT_SCORING,
) -> Forecast:
    cfg = config.forecast
    if trend.trend == TrendDirection.DECLINING:
        multiplier = cfg.declining_multiplier
    elif trend.trend == TrendDirection.IMPROVING:
        multiplier = cfg.improving_multiplier
    else:
        multiplier = 1.0

    urgent = [
        i for i in insights
        if i.severity in (InsightSeverity.CRITICAL, InsightSeverity.WARNING) and i.recommendation
    ]
    actions = [i.recommendation for i in urgent[: cfg.short_term_actions]]
    return _forecast("next_week", "Risk level: {level}", current_score * multiplier, actions, config)


def predict_medium_term(
    current_score: float,
    scores: FactorScores,
    config: ScoringConfig = DEFAULT_SCORING,
) -> Forecast:
    cfg = config.forecast
    values = scores.as_dict()

    predicted = current_score
    for factor, (threshold, penalty) in cfg.medium_penalties.items():
        if values[factor] > threshold:
            predicted += penalty

    actions = [
        MEDIUM_TERM_ACTIONS[factor]
        for factor, threshold in cfg.medium_action_thresholds.items()
        if values[factor] > threshold
    ]
    return _forecast(
        "next_month", "Risk level without intervention: {level}", predicted, actions, config
    )


def predict_long_term(
    current_score: float,
    trend: TrendAnalysis,
    scores: FactorScores,
    config: ScoringConfig = DEFAULT_SCORING,
) -> Forecast:
    cfg = config.forecast
    values = scores.as_dict()

    predicted = current_score + trend.volatility_index * cfg.volatility_weight
    for factor, (threshold, penalty) in cfg.long_penalties.items():
        if values[factor] > threshold:
            predicted += penalty

    return _forecast(
        "next_semester", "Long-term risk estimate: {level}", predicted, list(LONG_TERM_ACTIONS), config
    )


def generate_predictive_indicators(
    current_score: float,
    trend: TrendAnalysis,
    scores: FactorScores,
    insights: List[PatternInsight],
    config: ScoringConfig = DEFAULT_SCORING,
) -> PredictiveIndicators:
    return PredictiveIndicators(
        short_term=predict_short_term(current_score, trend, insights, config),
        medium_term=predict_medium_term(current_score, scores, config),
        long_term=predict_long_term(current_score, trend, scores, config),
    )
