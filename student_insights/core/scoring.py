# student_insights/core/scoring.py
"""
Every numeric threshold used by the analytics core lives here.

The services receive a ``ScoringConfig`` (defaulting to ``DEFAULT_SCORING``) so the
heuristics can be tuned and unit-tested without touching algorithm code.
"""
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, model_validator


FACTOR_KEYS = (
    "academic",
    "behavioral",
    "attendance",
    "social_emotional",
    "family_support",
    "peer_relations",
    "motivation",
    "health",
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ==========================================================
#  FACTOR CALCULATORS
# ==========================================================

class WindowConfig(_Frozen):
    """Look-back windows (days) and row limits used when loading history."""
    exam_days: int = 180
    exam_limit: int = 10
    behavior_days: int = 90
    attendance_days: int = 90
    correlation_days: int = 60
    month_days: int = 30
    history_limit: int = 20


class AcademicFactorConfig(_Frozen):
    base_weight: float = 0.7
    trend_weight: float = 0.3
    trend_sample: int = 3


class BehavioralFactorConfig(_Frozen):
    frequency_weight: float = 0.6
    severity_weight: float = 0.4
    frequency_cap: int = 10
    severity_map: Dict[str, float] = {"LOW": 0.3, "MEDIUM": 0.6, "HIGH": 1.0}
    unknown_severity: float = 0.5


class AttendanceFactorConfig(_Frozen):
    absence_weight: float = 0.7
    tardy_weight: float = 0.3
    absence_cap: int = 15
    tardy_cap: int = 20


class SocialEmotionalFactorConfig(_Frozen):
    skill_weight: float = 0.5
    circle_weight: float = 0.3
    bullying_weight: float = 0.2
    default_level: int = 3
    circle_size_risk: Dict[str, float] = {"NONE": 1.0, "FEW": 0.7, "MODERATE": 0.3, "LARGE": 0.0}
    bullying_risk: Dict[str, float] = {
        "VICTIM": 0.8,
        "PERPETRATOR": 0.9,
        "BOTH": 1.0,
        "OBSERVER": 0.0,
        "NONE": 0.0,
    }


class FamilyFactorConfig(_Frozen):
    involvement_weight: float = 0.4
    stability_weight: float = 0.4
    communication_weight: float = 0.2
    involvement_risk: Dict[str, float] = {"LOW": 0.9, "MEDIUM": 0.5, "HIGH": 0.1}
    involvement_default: float = 0.5
    stability_risk: Dict[str, float] = {"UNSTABLE": 1.0, "TRANSITIONING": 0.6}
    stability_default: float = 0.2
    communication_risk: Dict[str, float] = {"PROBLEMATIC": 0.8, "MIXED": 0.5}
    communication_default: float = 0.2


class PeerFactorConfig(_Frozen):
    integration_weight: float = 0.4
    friendship_weight: float = 0.4
    acceptance_weight: float = 0.2
    integration_risk: Dict[str, float] = {
        "CRITICAL_ISOLATION": 1.0,
        "ISOLATED": 0.8,
        "MODERATELY_INTEGRATED": 0.4,
    }
    integration_default: float = 0.1
    friendship_risk: Dict[str, float] = {"NONE": 1.0, "PROBLEMATIC": 0.7, "DEVELOPING": 0.4}
    friendship_default: float = 0.1
    default_acceptance: int = 5


class MotivationFactorConfig(_Frozen):
    intrinsic_weight: float = 0.6
    resilience_weight: float = 0.4
    default_level: int = 3


class HealthFactorConfig(_Frozen):
    chronic_score: float = 0.5
    concern_score: float = 0.3
    concern_min_length: int = 10


class NeutralDefaults(_Frozen):
    """Scores returned when a domain has no data at all."""
    academic: float = 0.0
    behavioral: float = 0.0
    social_emotional: float = 0.5
    family_support: float = 0.5
    peer_relations: float = 0.5
    motivation: float = 0.5
    health: float = 0.0


# ==========================================================
#  AGGREGATION / EXPLANATION / TREND
# ==========================================================

class LevelThresholds(_Frozen):
    low: float = 0.25
    medium: float = 0.50
    high: float = 0.75


class SeverityThresholds(_Frozen):
    include_above: float = 0.5
    high_above: float = 0.65
    critical_above: float = 0.8


class TrendConfig(_Frozen):
    change_threshold: float = 10.0
    variance_floor: float = 0.15
    volatile_above: float = 0.2
    horizon_factors: Dict[str, float] = {"next_7_days": 0.1, "next_30_days": 0.3, "next_90_days": 0.5}


class ForecastConfig(_Frozen):
    declining_multiplier: float = 1.1
    improving_multiplier: float = 0.9
    short_term_actions: int = 3
    # medium term: factor -> (threshold, penalty)
    medium_penalties: Dict[str, tuple[float, float]] = {
        "behavioral": (0.7, 0.10),
        "attendance": (0.6, 0.08),
        "academic": (0.7, 0.12),
    }
    medium_action_thresholds: Dict[str, float] = {
        "behavioral": 0.6,
        "attendance": 0.5,
        "academic": 0.6,
    }
    long_penalties: Dict[str, tuple[float, float]] = {
        "family_support": (0.7, 0.15),
        "social_emotional": (0.6, 0.10),
    }
    volatility_weight: float = 0.15


# ==========================================================
#  PATTERN MINING
# ==========================================================

class PatternConfig(_Frozen):
    academic_sample: int = 3
    academic_delta: float = 10.0
    subject_sample: int = 2
    subject_min_exams: int = 3
    subject_delta: float = 15.0
    behavior_increase_min: int = 3
    repeated_category_min: int = 3
    repeated_category_critical: int = 5
    weekday_min: int = 3
    monthly_absence_warning: int = 5
    monthly_absence_critical: int = 10
    correlation_absences: int = 5
    correlation_grade_below: float = 60.0
    correlation_incidents: int = 3
    correlation_regulation_below: int = 3
    seasonal_min_months: int = 3
    seasonal_drop: float = 10.0


# ==========================================================
#  SOCIAL GRAPH
# ==========================================================

class NetworkConfig(_Frozen):
    isolation_high_below: float = 0.1
    isolation_medium_below: float = 0.25
    leader_above: float = 0.5
    bridge_above: float = 0.3
    follower_above: float = 0.15
    cluster_min_strength: int = 5
    central_figures_limit: int = 5
    conflict_concern_above: int = 2
    close_friends_strength: int = 3
    small_network_below: int = 3
    high_integration_degree: int = 5
    low_integration_degree: int = 2


class ScoringConfig(_Frozen):
    weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "academic": 0.25,
            "behavioral": 0.20,
            "attendance": 0.20,
            "social_emotional": 0.15,
            "family_support": 0.08,
            "peer_relations": 0.07,
            "motivation": 0.03,
            "health": 0.02,
        }
    )
    windows: WindowConfig = WindowConfig()
    academic: AcademicFactorConfig = AcademicFactorConfig()
    behavioral: BehavioralFactorConfig = BehavioralFactorConfig()
    attendance: AttendanceFactorConfig = AttendanceFactorConfig()
    social_emotional: SocialEmotionalFactorConfig = SocialEmotionalFactorConfig()
    family: FamilyFactorConfig = FamilyFactorConfig()
    peer: PeerFactorConfig = PeerFactorConfig()
    motivation: MotivationFactorConfig = MotivationFactorConfig()
    health: HealthFactorConfig = HealthFactorConfig()
    defaults: NeutralDefaults = NeutralDefaults()
    levels: LevelThresholds = LevelThresholds()
    severity: SeverityThresholds = SeverityThresholds()
    trend: TrendConfig = TrendConfig()
    forecast: ForecastConfig = ForecastConfig()
    patterns: PatternConfig = PatternConfig()
    network: NetworkConfig = NetworkConfig()
    confidence_domains: int = 8

    @model_validator(mode="after")
    def _check_weights(self) -> "ScoringConfig":
        if set(self.weights) != set(FACTOR_KEYS):
            raise ValueError(f"weights must cover exactly {FACTOR_KEYS}")
        total = sum(self.weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"factor weights must sum to 1.0, got {total}")
        if not self.levels.low < self.levels.medium < self.levels.high:
            raise ValueError("risk level thresholds must be increasing")
        return self


DEFAULT_SCORING = ScoringConfig()
