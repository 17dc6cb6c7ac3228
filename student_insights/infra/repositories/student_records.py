# student_insights/infra/repositories/student_records.py
"""
SQLAlchemy implementation of the record source and snapshot writer.

Every collection is returned newest first and restricted to the window configured
in ``ScoringConfig.windows``.
"""
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from student_insights.core.errors import StudentNotFoundError
from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities import records
from student_insights.domain.entities.network import NetworkMetrics, PeerGroup
from student_insights.domain.entities.risk import RiskAssessment
from student_insights.domain.parsing import parse_list_field
from student_insights.infra.db.models.academic import SUBJECT_COLUMNS, ExamResult
from student_insights.infra.db.models.attendance import AttendanceRecord
from student_insights.infra.db.models.behavior import BehaviorIncident
from student_insights.infra.db.models.network_metrics import SocialNetworkMetrics
from student_insights.infra.db.models.peer_relationship import PeerRelationship
from student_insights.infra.db.models.profiles import (
    FamilyContextProfile,
    HealthProfile,
    MotivationProfile,
    SocialEmotionalProfile,
    TalentProfile,
)
from student_insights.infra.db.models.risk_history import RiskScoreHistory
from student_insights.infra.db.models.social_group import SocialGroup, SocialGroupMember
from student_insights.infra.db.models.student import Student

logger = logging.getLogger(__name__)


class SqlRecordStore:
    def __init__(self, db: AsyncSession, config: ScoringConfig = DEFAULT_SCORING):
        self.db = db
        self.config = config

    # ==========================================================
    #  READS
    # ==========================================================

    async def get_student(self, student_id: str) -> Optional[records.StudentRecord]:
        row = await self.db.get(Student, student_id)
        if row is None:
            return None
        return records.StudentRecord(id=row.id, name=row.name, class_name=row.class_name)

    async def list_students(self, class_name: Optional[str] = None) -> List[records.StudentRecord]:
        stmt = select(Student).order_by(Student.id)
        if class_name is not None:
            stmt = stmt.where(Student.class_name == class_name)
        rows = (await self.db.execute(stmt)).scalars().all()
        return [records.StudentRecord(id=r.id, name=r.name, class_name=r.class_name) for r in rows]

    async def list_classes(self) -> List[str]:
        stmt = select(Student.class_name).where(Student.class_name.is_not(None)).distinct()
        return sorted((await self.db.execute(stmt)).scalars().all())

    async def class_relationships(self, class_name: str) -> List[records.PeerRelationship]:
        stmt = (
            select(PeerRelationship)
            .join(Student, PeerRelationship.student_id == Student.id)
            .where(Student.class_name == class_name)
            .order_by(PeerRelationship.id)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [self._to_relationship(r) for r in rows]

    async def student_groups(self, student_id: str) -> List[PeerGroup]:
        """Active groups the student belongs to, with their current head count."""
        counted = aliased(SocialGroupMember)
        member_count = (
            select(func.count(counted.id))
            .where(counted.group_id == SocialGroup.id)
            .correlate(SocialGroup)
            .scalar_subquery()
        )
        stmt = (
            select(SocialGroup.id, SocialGroup.group_name, SocialGroupMember.role, member_count)
            .select_from(SocialGroupMember)
            .join(SocialGroup, SocialGroupMember.group_id == SocialGroup.id)
            .where(SocialGroupMember.student_id == student_id, SocialGroup.is_active.is_(True))
            .order_by(SocialGroup.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            PeerGroup(group_id=str(gid), group_name=name, role=role, member_count=count)
            for gid, name, role, count in rows
        ]

    async def load_context(self, student_id: str, now: datetime) -> records.StudentContext:
        student = await self.get_student(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        try:
            return await self._context(student, now)
        except SQLAlchemyError:
            # a failed read aborts the transaction on PostgreSQL
            await self.db.rollback()
            raise

    async def _context(self, student: records.StudentRecord, now: datetime) -> records.StudentContext:
        student_id = student.id
        return records.StudentContext(
            student=student,
            exams=await self._exams(student_id, now),
            incidents=await self._incidents(student_id, now),
            attendance=await self._attendance(student_id, now),
            social_emotional=await self._social_emotional(student_id),
            family=await self._family(student_id),
            motivation=await self._motivation(student_id),
            health=await self._health(student_id),
            talents=await self._talents(student_id),
            peer_relationships=await self._relationships(student_id),
            risk_history=await self._risk_history(student_id),
        )

    async def _exams(self, student_id: str, now: datetime) -> List[records.ExamResult]:
        since = (now - timedelta(days=self.config.windows.exam_days)).date()
        stmt = (
            select(ExamResult)
            .where(ExamResult.student_id == student_id, ExamResult.exam_date >= since)
            .order_by(desc(ExamResult.exam_date))
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [
            records.ExamResult(
                exam_date=r.exam_date,
                total_score=r.total_score,
                exam_name=r.exam_name,
                subject_scores={
                    label: getattr(r, column)
                    for column, label in SUBJECT_COLUMNS.items()
                    if getattr(r, column) is not None
                },
            )
            for r in rows
        ]

    async def _incidents(self, student_id: str, now: datetime) -> List[records.BehaviorIncident]:
        since = (now - timedelta(days=self.config.windows.behavior_days)).date()
        stmt = (
            select(BehaviorIncident)
            .where(BehaviorIncident.student_id == student_id, BehaviorIncident.incident_date >= since)
            .order_by(desc(BehaviorIncident.incident_date))
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [
            records.BehaviorIncident(
                incident_date=r.incident_date,
                behavior_type=r.behavior_type,
                behavior_category=r.behavior_category,
                severity=r.severity,
                description=r.description,
            )
            for r in rows
        ]

    async def _attendance(self, student_id: str, now: datetime) -> List[records.AttendanceRecord]:
        since = (now - timedelta(days=self.config.windows.attendance_days)).date()
        stmt = (
            select(AttendanceRecord)
            .where(AttendanceRecord.student_id == student_id, AttendanceRecord.date >= since)
            .order_by(desc(AttendanceRecord.date))
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [records.AttendanceRecord(date=r.date, status=r.status, reason=r.reason) for r in rows]

    async def _latest(self, model, student_id: str):
        stmt = (
            select(model)
            .where(model.student_id == student_id)
            .order_by(desc(model.assessment_date), desc(model.id))
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def _social_emotional(self, student_id: str) -> Optional[records.SocialEmotionalProfile]:
        r = await self._latest(SocialEmotionalProfile, student_id)
        if r is None:
            return None
        return records.SocialEmotionalProfile(
            assessed_at=r.assessment_date,
            empathy_level=r.empathy_level,
            emotion_regulation_level=r.emotion_regulation_level,
            conflict_resolution_level=r.conflict_resolution_level,
            leadership_level=r.leadership_level,
            teamwork_level=r.teamwork_level,
            friend_circle_size=r.friend_circle_size,
            friend_circle_quality=r.friend_circle_quality,
            bullying_status=r.bullying_status,
            social_integration_level=r.social_integration_level,
            friendship_quality=r.friendship_quality,
            peer_acceptance=r.peer_acceptance,
        )

    async def _family(self, student_id: str) -> Optional[records.FamilyContextProfile]:
        r = await self._latest(FamilyContextProfile, student_id)
        if r is None:
            return None
        return records.FamilyContextProfile(
            assessed_at=r.assessment_date,
            parental_involvement_level=r.parental_involvement_level,
            family_stability_level=r.family_stability_level,
            communication_quality=r.communication_quality,
        )

    async def _motivation(self, student_id: str) -> Optional[records.MotivationProfile]:
        r = await self._latest(MotivationProfile, student_id)
        if r is None:
            return None
        return records.MotivationProfile(
            assessed_at=r.assessment_date,
            intrinsic_motivation=r.intrinsic_motivation,
            extrinsic_motivation=r.extrinsic_motivation,
            goal_orientation=r.goal_orientation,
            resilience_level=r.resilience_level,
        )

    async def _health(self, student_id: str) -> Optional[records.HealthProfile]:
        r = await self._latest(HealthProfile, student_id)
        if r is None:
            return None
        return records.HealthProfile(
            assessed_at=r.assessment_date,
            chronic_conditions=self._list_field(r.chronic_conditions, "chronic_conditions", student_id),
            health_concerns=r.health_concerns,
            medication_compliance=r.medication_compliance,
        )

    async def _talents(self, student_id: str) -> Optional[records.TalentProfile]:
        r = await self._latest(TalentProfile, student_id)
        if r is None:
            return None
        return records.TalentProfile(
            assessed_at=r.assessment_date,
            creative_talents=self._list_field(r.creative_talents, "creative_talents", student_id),
            physical_talents=self._list_field(r.physical_talents, "physical_talents", student_id),
            primary_interests=self._list_field(r.primary_interests, "primary_interests", student_id),
        )

    async def _relationships(self, student_id: str) -> List[records.PeerRelationship]:
        stmt = select(PeerRelationship).where(PeerRelationship.student_id == student_id)
        rows = (await self.db.execute(stmt)).scalars().all()
        return [self._to_relationship(r) for r in rows]

    async def _risk_history(self, student_id: str) -> List[records.RiskHistoryEntry]:
        stmt = (
            select(RiskScoreHistory)
            .where(RiskScoreHistory.student_id == student_id)
            .order_by(desc(RiskScoreHistory.assessment_date), desc(RiskScoreHistory.id))
            .limit(self.config.windows.history_limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [
            records.RiskHistoryEntry(
                student_id=r.student_id,
                assessed_at=r.assessment_date,
                overall_score=r.overall_risk_score,
                risk_level=r.risk_level,
                factor_scores=self._factor_field(r.factor_scores, student_id),
                calculation_method=r.calculation_method or "WEIGHTED_HEURISTIC",
            )
            for r in rows
        ]

    @staticmethod
    def _to_relationship(r: PeerRelationship) -> records.PeerRelationship:
        return records.PeerRelationship(
            student_id=r.student_id,
            peer_id=r.peer_id,
            relationship_type=r.relationship_type,
            strength=r.relationship_strength or 5,
        )

    @staticmethod
    def _list_field(raw, field_name: str, student_id: str) -> List[str]:
        parsed = parse_list_field(raw)
        if not parsed.ok:
            logger.warning("Malformed %s for student %s: %s", field_name, student_id, parsed.error)
        return parsed.values

    @staticmethod
    def _factor_field(raw, student_id: str) -> dict:
        if not raw:
            return {}
        try:
            decoded = json.loads(raw)
        except ValueError as e:
            logger.warning("Malformed factor_scores in risk history for %s: %s", student_id, e)
            return {}
        return decoded if isinstance(decoded, dict) else {}

    # ==========================================================
    #  WRITES
    # ==========================================================

    async def append_risk_snapshot(self, assessment: RiskAssessment) -> None:
        scores = assessment.factor_scores
        async with self._transaction():
            self.db.add(
                RiskScoreHistory(
                    student_id=assessment.student_id,
                    assessment_date=assessment.calculated_at,
                    academic_score=scores.academic,
                    behavioral_score=scores.behavioral,
                    attendance_score=scores.attendance,
                    social_emotional_score=scores.social_emotional,
                    overall_risk_score=assessment.overall_score,
                    risk_level=assessment.risk_level.value,
                    factor_scores=json.dumps(scores.as_dict()),
                    confidence=assessment.confidence,
                    calculation_method="WEIGHTED_HEURISTIC",
                )
            )

    async def upsert_network_metrics(self, metrics: NetworkMetrics) -> None:
        values = {
            "student_id": metrics.student_id,
            "class_name": metrics.class_name,
            "assessment_date": metrics.assessed_at,
            "centrality_score": metrics.centrality,
            "betweenness_score": metrics.betweenness,
            "degree_count": metrics.degree,
            "isolation_risk": metrics.isolation_risk.value,
            "social_role": metrics.social_role.value,
            "influence_score": metrics.influence_score,
        }
        dialect = self.db.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(SocialNetworkMetrics).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["student_id", "class_name"],
            set_={k: v for k, v in values.items() if k not in ("student_id", "class_name")},
        )
        async with self._transaction():
            await self.db.execute(stmt)

    @asynccontextmanager
    async def _transaction(self):
        """Commits on success; any failure rolls the session back so it stays usable."""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
