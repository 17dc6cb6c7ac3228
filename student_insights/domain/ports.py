# student_insights/domain/ports.py
from datetime import datetime
from typing import List, Optional, Protocol

from student_insights.domain.entities.network import NetworkMetrics, PeerGroup
from student_insights.domain.entities.records import (
    PeerRelationship,
    StudentContext,
    StudentRecord,
)
from student_insights.domain.entities.risk import RiskAssessment


class RecordSource(Protocol):
    """Read contract the analytics core expects from storage."""

    async def get_student(self, student_id: str) -> Optional[StudentRecord]: ...

    async def load_context(self, student_id: str, now: datetime) -> StudentContext:
        """Raises ``StudentNotFoundError`` for an unknown id."""
        ...

    async def list_students(self, class_name: Optional[str] = None) -> List[StudentRecord]: ...

    async def class_relationships(self, class_name: str) -> List[PeerRelationship]: ...

    async def list_classes(self) -> List[str]: ...

    async def student_groups(self, student_id: str) -> List[PeerGroup]:
        """Active peer groups the student is a member of."""
        ...


class SnapshotWriter(Protocol):
    """The only two writes the core performs."""

    async def append_risk_snapshot(self, assessment: RiskAssessment) -> None: ...

    async def upsert_network_metrics(self, metrics: NetworkMetrics) -> None: ...
