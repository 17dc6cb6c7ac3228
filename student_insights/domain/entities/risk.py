# student_insights/domain/entities/risk.py
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FactorSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TrendDirection(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"
    VOLATILE = "VOLATILE"


@dataclass(frozen=True)
class FactorScores:
    academic: float = 0.0
    behavioral: float = 0.0
    attendance: float = 0.0
    social_emotional: float = 0.0
    family_support: float = 0.0
    peer_relations: float = 0.0
    motivation: float = 0.0
    health: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class KeyRiskFactor:
    factor: str
    label: str
    severity: FactorSeverity
    score: float
    description: str
    recommendation: str
    trend: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class ProtectiveFactor:
    factor: str
    strength: int
    description: str


@dataclass(frozen=True)
class Forecast:
    horizon: str
    summary: str
    predicted_score: float
    predicted_level: RiskLevel
    probability: int
    suggested_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PredictiveIndicators:
    short_term: Forecast
    medium_term: Forecast
    long_term: Forecast


@dataclass(frozen=True)
class RiskAssessment:
    student_id: str
    student_name: str
    calculated_at: datetime
    factor_scores: FactorScores
    overall_score: float
    risk_level: RiskLevel
    confidence: float
    key_risk_factors: List[KeyRiskFactor] = field(default_factory=list)
    protective_factors: List[ProtectiveFactor] = field(default_factory=list)
    predictive_indicators: Optional[PredictiveIndicators] = None
