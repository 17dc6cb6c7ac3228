# student_insights/domain/entities/batch.py
from dataclasses import dataclass, field
from typing import List

from student_insights.domain.entities.risk import RiskAssessment


@dataclass(frozen=True)
class BatchFailure:
    student_id: str
    error: str


@dataclass
class BatchResult:
    succeeded: List[RiskAssessment] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
