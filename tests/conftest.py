# tests/conftest.py
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

import pytest

from student_insights.core.errors import StudentNotFoundError
from student_insights.domain.entities.network import PeerGroup
from student_insights.domain.entities.records import (
    AttendanceRecord,
    BehaviorIncident,
    ExamResult,
    PeerRelationship,
    RiskHistoryEntry,
    StudentContext,
    StudentRecord,
)

NOW = datetime(2025, 3, 14, 9, 30)


def days_ago(n: int) -> date:
    return (NOW - timedelta(days=n)).date()


def exams_oldest_to_newest(scores, step: int = 14) -> List[ExamResult]:
    """Exams spaced ``step`` days apart, the last one yesterday; returned newest first."""
    total = len(scores)
    exams = [
        ExamResult(exam_date=days_ago(1 + step * (total - 1 - i)), total_score=s, exam_name=f"exam {i + 1}")
        for i, s in enumerate(scores)
    ]
    return list(reversed(exams))


def negative_incident(days: int, category: str = "DISRUPTION", severity: str = "MEDIUM") -> BehaviorIncident:
    return BehaviorIncident(
        incident_date=days_ago(days),
        behavior_type="NEGATIVE",
        behavior_category=category,
        severity=severity,
    )


def attendance(days: int, status: str = "ABSENT") -> AttendanceRecord:
    return AttendanceRecord(date=days_ago(days), status=status)


class InMemoryStore:
    """Record source and snapshot writer over plain dicts."""

    def __init__(self):
        self.students: Dict[str, StudentRecord] = {}
        self.contexts: Dict[str, StudentContext] = {}
        self.edges: List[PeerRelationship] = []
        self.snapshots = []
        self.metrics = {}
        self.groups: Dict[str, List[PeerGroup]] = {}

    def add(self, ctx: StudentContext) -> None:
        self.students[ctx.student_id] = ctx.student
        self.contexts[ctx.student_id] = ctx

    async def get_student(self, student_id: str) -> Optional[StudentRecord]:
        return self.students.get(student_id)

    async def load_context(self, student_id: str, now: datetime) -> StudentContext:
        if student_id not in self.contexts:
            raise StudentNotFoundError(student_id)
        return self.contexts[student_id]

    async def list_students(self, class_name: Optional[str] = None) -> List[StudentRecord]:
        return [s for s in self.students.values() if class_name is None or s.class_name == class_name]

    async def class_relationships(self, class_name: str) -> List[PeerRelationship]:
        ids = {s.id for s in await self.list_students(class_name)}
        return [e for e in self.edges if e.student_id in ids]

    async def list_classes(self) -> List[str]:
        return sorted({s.class_name for s in self.students.values() if s.class_name})

    async def student_groups(self, student_id: str) -> List[PeerGroup]:
        return list(self.groups.get(student_id, []))

    async def append_risk_snapshot(self, assessment) -> None:
        self.snapshots.append(assessment)
        ctx = self.contexts[assessment.student_id]
        ctx.risk_history.insert(
            0,
            RiskHistoryEntry(
                student_id=assessment.student_id,
                assessed_at=assessment.calculated_at,
                overall_score=assessment.overall_score,
                risk_level=assessment.risk_level.value,
                factor_scores=assessment.factor_scores.as_dict(),
            ),
        )

    async def upsert_network_metrics(self, metrics) -> None:
        self.metrics[(metrics.student_id, metrics.class_name)] = metrics


class BrokenWriter:
    async def append_risk_snapshot(self, assessment) -> None:
        raise RuntimeError("database is read-only")

    async def upsert_network_metrics(self, metrics) -> None:
        raise RuntimeError("database is read-only")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def regression_context() -> StudentContext:
    """
    Exams 50, 55, 60, 85, 88, 90 (oldest to newest), two negative incidents this
    month and none the month before, no absences and no profile data.
    """
    return StudentContext(
        student=StudentRecord(id="s-100", name="Ada Park", class_name="7B"),
        exams=exams_oldest_to_newest([50, 55, 60, 85, 88, 90]),
        incidents=[negative_incident(3), negative_incident(10)],
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def broken_writer() -> BrokenWriter:
    return BrokenWriter()
