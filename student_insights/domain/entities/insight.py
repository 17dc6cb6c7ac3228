# student_insights/domain/entities/insight.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class InsightCategory(str, Enum):
    TREND = "TREND"
    PATTERN = "PATTERN"
    CORRELATION = "CORRELATION"
    ANOMALY = "ANOMALY"
    PREDICTION = "PREDICTION"


class InsightSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class PatternInsight:
    category: InsightCategory
    severity: InsightSeverity
    title: str
    description: str
    evidence: List[str] = field(default_factory=list)
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class FormattedInsights:
    """Insights grouped for dashboards and report composers, most severe first."""
    critical: List[PatternInsight] = field(default_factory=list)
    warning: List[PatternInsight] = field(default_factory=list)
    info: List[PatternInsight] = field(default_factory=list)

    @property
    def ordered(self) -> List[PatternInsight]:
        return [*self.critical, *self.warning, *self.info]

    @property
    def is_empty(self) -> bool:
        return not (self.critical or self.warning or self.info)
