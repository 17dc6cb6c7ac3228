# student_insights/domain/entities/trend.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from student_insights.domain.entities.risk import TrendDirection


@dataclass(frozen=True)
class HistoricalScore:
    date: datetime
    score: float
    level: str


@dataclass(frozen=True)
class TrendPredictions:
    next_7_days: float
    next_30_days: float
    next_90_days: float


@dataclass(frozen=True)
class TrendAnalysis:
    student_id: str
    trend: TrendDirection
    trend_percentage: float
    volatility_index: float
    predictions: TrendPredictions
    # newest first
    historical_scores: List[HistoricalScore] = field(default_factory=list)
