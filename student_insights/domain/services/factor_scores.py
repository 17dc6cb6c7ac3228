# student_insights/domain/services/factor_scores.py
"""
The eight factor calculators.

Each one is a pure function of the student's recent history returning a risk
contribution in [0, 1] (higher means more risk). A domain without data returns the
neutral default from ``ScoringConfig.defaults`` instead of raising.
"""
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

import numpy as np

from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.records import (
    AttendanceRecord,
    AttendanceStatus,
    BehaviorIncident,
    ExamResult,
    StudentContext,
)
from student_insights.domain.entities.risk import FactorScores


def average(values) -> float:
    return float(np.mean(values))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def window_start(now: datetime, days: int) -> date:
    return (now - timedelta(days=days)).date()


def recent_exams(exams: List[ExamResult], now: datetime, days: int) -> List[ExamResult]:
    start = window_start(now, days)
    return [e for e in exams if e.exam_date >= start and e.total_score is not None]


def recent_incidents(incidents: List[BehaviorIncident], now: datetime, days: int) -> List[BehaviorIncident]:
    start = window_start(now, days)
    return [i for i in incidents if i.incident_date >= start]


def recent_attendance(records: List[AttendanceRecord], now: datetime, days: int) -> List[AttendanceRecord]:
    start = window_start(now, days)
    return [r for r in records if r.date >= start]


def _level(value: Optional[int], default: int) -> int:
    # 0 is not a valid level on the 1-5 scales, treat it like a missing answer
    return value if value else default


# ==========================================================
#  CALCULATORS
# ==========================================================

def academic_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.academic
    exams = recent_exams(ctx.exams, now, config.windows.exam_days)
    exams = sorted(exams, key=lambda e: e.exam_date, reverse=True)[: config.windows.exam_limit]
    if not exams:
        return config.defaults.academic

    # newest first
    scores = [float(e.total_score) for e in exams]
    base_risk = (100 - average(scores)) / 100

    trend = 0.0
    if len(scores) >= cfg.trend_sample:
        newest = average(scores[: cfg.trend_sample])
        oldest = average(scores[-cfg.trend_sample:])
        # falling grades raise risk, rising grades never reduce it below the base
        trend = (oldest - newest) / 100

    return clamp(base_risk * cfg.base_weight + max(0.0, trend) * cfg.trend_weight)


def behavioral_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.behavioral
    incidents = recent_incidents(ctx.incidents, now, config.windows.behavior_days)
    negative = [i for i in incidents if i.is_negative]
    if not negative:
        return config.defaults.behavioral

    total_severity = sum(
        cfg.severity_map.get((i.severity or "").upper(), cfg.unknown_severity) for i in negative
    )
    frequency = min(1.0, len(negative) / cfg.frequency_cap)
    severity = min(1.0, total_severity / len(negative))

    return clamp(frequency * cfg.frequency_weight + severity * cfg.severity_weight)


def attendance_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.attendance
    records = recent_attendance(ctx.attendance, now, config.windows.attendance_days)
    absences = sum(1 for r in records if r.status == AttendanceStatus.ABSENT.value)
    tardies = sum(1 for r in records if r.status == AttendanceStatus.LATE.value)

    absence_score = min(1.0, absences / cfg.absence_cap)
    tardy_score = min(1.0, tardies / cfg.tardy_cap)

    return clamp(absence_score * cfg.absence_weight + tardy_score * cfg.tardy_weight)


def social_emotional_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.social_emotional
    profile = ctx.social_emotional
    if profile is None:
        return config.defaults.social_emotional

    avg_skill = (
        _level(profile.empathy_level, cfg.default_level)
        + _level(profile.emotion_regulation_level, cfg.default_level)
        + _level(profile.conflict_resolution_level, cfg.default_level)
    ) / 3
    skill_risk = (5 - avg_skill) / 5
    circle_risk = cfg.circle_size_risk.get((profile.friend_circle_size or "").upper(), 0.0)
    bullying_risk = cfg.bullying_risk.get((profile.bullying_status or "").upper(), 0.0)

    return clamp(
        skill_risk * cfg.skill_weight
        + circle_risk * cfg.circle_weight
        + bullying_risk * cfg.bullying_weight
    )


def family_support_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.family
    profile = ctx.family
    if profile is None:
        return config.defaults.family_support

    involvement = cfg.involvement_risk.get(
        (profile.parental_involvement_level or "").upper(), cfg.involvement_default
    )
    stability = cfg.stability_risk.get(
        (profile.family_stability_level or "").upper(), cfg.stability_default
    )
    communication = cfg.communication_risk.get(
        (profile.communication_quality or "").upper(), cfg.communication_default
    )

    return clamp(
        involvement * cfg.involvement_weight
        + stability * cfg.stability_weight
        + communication * cfg.communication_weight
    )


def peer_relations_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.peer
    profile = ctx.social_emotional
    if profile is None:
        return config.defaults.peer_relations

    integration = cfg.integration_risk.get(
        (profile.social_integration_level or "").upper(), cfg.integration_default
    )
    friendship = cfg.friendship_risk.get(
        (profile.friendship_quality or "").upper(), cfg.friendship_default
    )
    acceptance = profile.peer_acceptance if profile.peer_acceptance else cfg.default_acceptance
    acceptance_risk = 1 - clamp(acceptance / 10)

    return clamp(
        integration * cfg.integration_weight
        + friendship * cfg.friendship_weight
        + acceptance_risk * cfg.acceptance_weight
    )


def motivation_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.motivation
    profile = ctx.motivation
    if profile is None:
        return config.defaults.motivation

    intrinsic_risk = (5 - _level(profile.intrinsic_motivation, cfg.default_level)) / 5
    resilience_risk = (5 - _level(profile.resilience_level, cfg.default_level)) / 5

    return clamp(intrinsic_risk * cfg.intrinsic_weight + resilience_risk * cfg.resilience_weight)


def health_score(ctx: StudentContext, now: datetime, config: ScoringConfig = DEFAULT_SCORING) -> float:
    cfg = config.health
    profile = ctx.health
    if profile is None:
        return config.defaults.health

    if profile.chronic_conditions:
        return cfg.chronic_score
    if profile.health_concerns and len(profile.health_concerns) > cfg.concern_min_length:
        return cfg.concern_score
    return 0.0


FactorCalculator = Callable[[StudentContext, datetime, ScoringConfig], float]

CALCULATORS: Dict[str, FactorCalculator] = {
    "academic": academic_score,
    "behavioral": behavioral_score,
    "attendance": attendance_score,
    "social_emotional": social_emotional_score,
    "family_support": family_support_score,
    "peer_relations": peer_relations_score,
    "motivation": motivation_score,
    "health": health_score,
}


def calculate_factor_scores(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> FactorScores:
    """Run every calculator; they read disjoint parts of the context."""
    return FactorScores(**{key: calc(ctx, now, config) for key, calc in CALCULATORS.items()})
