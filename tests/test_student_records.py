# tests/test_student_records.py
import json
import logging
from datetime import date, datetime

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from conftest import NOW, days_ago
from student_insights.core.clock import fixed_clock
from student_insights.core.errors import StudentNotFoundError
from student_insights.domain.entities.network import IsolationRisk, NetworkMetrics, PeerGroup, SocialRole
from student_insights.domain.services.insights_service import InsightsService
from student_insights.infra.db.base import Base
from student_insights.infra.db.models.academic import ExamResult
from student_insights.infra.db.models.attendance import AttendanceRecord
from student_insights.infra.db.models.behavior import BehaviorIncident
from student_insights.infra.db.models.network_metrics import SocialNetworkMetrics
from student_insights.infra.db.models.peer_relationship import PeerRelationship
from student_insights.infra.db.models.profiles import SocialEmotionalProfile, TalentProfile
from student_insights.infra.db.models.risk_history import RiskScoreHistory
from student_insights.infra.db.models.social_group import SocialGroup, SocialGroupMember
from student_insights.infra.db.models.student import Student
from student_insights.infra.repositories.student_records import SqlRecordStore
from student_insights.jobs.recompute_risk import recompute


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def seeded(session):
    session.add_all([
        Student(id="s-1", name="Ada Park", class_name="7B"),
        Student(id="s-2", name="Ben Ortiz", class_name="7B"),
        Student(id="s-3", name="Cy Moreau", class_name="8A"),
    ])
    session.add_all([
        ExamResult(student_id="s-1", exam_date=days_ago(10), total_score=80, math_score=75, language_score=85),
        ExamResult(student_id="s-1", exam_date=days_ago(40), total_score=70),
        ExamResult(student_id="s-1", exam_date=days_ago(400), total_score=20),
        BehaviorIncident(
            student_id="s-1", incident_date=days_ago(5), behavior_type="NEGATIVE",
            behavior_category="DISRUPTION", severity="LOW",
        ),
        BehaviorIncident(
            student_id="s-1", incident_date=days_ago(120), behavior_type="NEGATIVE",
            behavior_category="DISRUPTION", severity="HIGH",
        ),
        AttendanceRecord(student_id="s-1", date=days_ago(2), status="ABSENT"),
        AttendanceRecord(student_id="s-1", date=days_ago(20), status="LATE"),
        SocialEmotionalProfile(student_id="s-1", assessment_date=date(2024, 9, 1), empathy_level=2),
        SocialEmotionalProfile(student_id="s-1", assessment_date=date(2025, 2, 1), empathy_level=4),
        TalentProfile(
            student_id="s-1", assessment_date=date(2025, 1, 10),
            creative_talents=json.dumps(["music"]), physical_talents="not json",
        ),
        PeerRelationship(student_id="s-1", peer_id="s-2", relationship_type="FRIEND", relationship_strength=6),
        PeerRelationship(student_id="s-2", peer_id="s-1", relationship_type="CLOSE_FRIEND", relationship_strength=9),
        PeerRelationship(student_id="s-3", peer_id="s-1", relationship_type="CONFLICT", relationship_strength=4),
        RiskScoreHistory(
            student_id="s-1", assessment_date=datetime(2025, 1, 1), overall_risk_score=0.4,
            risk_level="MEDIUM", factor_scores="{broken",
        ),
        RiskScoreHistory(
            student_id="s-1", assessment_date=datetime(2025, 2, 1), overall_risk_score=0.3,
            risk_level="MEDIUM", factor_scores=json.dumps({"academic": 0.2}),
        ),
    ])
    await session.commit()
    return SqlRecordStore(session)


async def test_load_context_windows_and_orders(seeded):
    ctx = await seeded.load_context("s-1", NOW)

    assert ctx.student.name == "Ada Park"
    assert [e.total_score for e in ctx.exams] == [80, 70]
    assert ctx.exams[0].subject_scores == {"Language": 85, "Mathematics": 75}
    assert [i.severity for i in ctx.incidents] == ["LOW"]
    assert [r.status for r in ctx.attendance] == ["ABSENT", "LATE"]
    assert ctx.social_emotional.empathy_level == 4
    assert ctx.family is None
    assert [h.overall_score for h in ctx.risk_history] == [0.3, 0.4]
    assert ctx.risk_history[0].factor_scores == {"academic": 0.2}
    assert ctx.risk_history[1].factor_scores == {}
    assert ctx.populated_domains() == 5


async def test_malformed_list_column_is_empty_and_logged(seeded, caplog):
    with caplog.at_level(logging.WARNING):
        ctx = await seeded.load_context("s-1", NOW)

    assert ctx.talents.creative_talents == ["music"]
    assert ctx.talents.physical_talents == []
    assert "Malformed physical_talents for student s-1" in caplog.text


async def test_unknown_student(seeded):
    assert await seeded.get_student("nope") is None
    with pytest.raises(StudentNotFoundError):
        await seeded.load_context("nope", NOW)


async def test_rosters_and_relationships(seeded):
    assert [s.id for s in await seeded.list_students("7B")] == ["s-1", "s-2"]
    assert len(await seeded.list_students()) == 3
    assert await seeded.list_classes() == ["7B", "8A"]

    edges = await seeded.class_relationships("7B")
    assert {(e.student_id, e.peer_id, e.strength) for e in edges} == {("s-1", "s-2", 6), ("s-2", "s-1", 9)}


async def test_committed_assessment_shows_up_in_history(seeded, session):
    service = InsightsService(source=seeded, writer=seeded, clock=fixed_clock(NOW))

    assessment = await service.commit_to_history("s-1")

    ctx = await seeded.load_context("s-1", NOW)
    assert ctx.risk_history[0].assessed_at == NOW
    assert ctx.risk_history[0].overall_score == pytest.approx(assessment.overall_score)
    assert ctx.risk_history[0].factor_scores == assessment.factor_scores.as_dict()


async def test_network_metrics_upsert_keeps_one_row(seeded, session):
    first = NetworkMetrics(
        student_id="s-1", class_name="7B", centrality=0.5, betweenness=0.0, degree=1,
        isolation_risk=IsolationRisk.LOW, social_role=SocialRole.BRIDGE, influence_score=50.0,
        assessed_at=datetime(2025, 3, 1),
    )
    second = NetworkMetrics(
        student_id="s-1", class_name="7B", centrality=0.0, betweenness=0.0, degree=0,
        isolation_risk=IsolationRisk.CRITICAL, social_role=SocialRole.ISOLATE, influence_score=0.0,
        assessed_at=NOW,
    )

    await seeded.upsert_network_metrics(first)
    await seeded.upsert_network_metrics(second)

    count = await session.scalar(select(func.count()).select_from(SocialNetworkMetrics))
    assert count == 1
    row = await session.scalar(select(SocialNetworkMetrics))
    assert row.social_role == "ISOLATE"
    assert row.degree_count == 0
    assert row.assessment_date == NOW


async def test_class_network_through_the_store(seeded, session):
    service = InsightsService(source=seeded, writer=seeded, clock=fixed_clock(NOW))

    network = await service.class_network("7B")

    assert network.total_students == 2
    assert [c.members for c in network.clusters] == [["s-1", "s-2"]]
    stored = (await session.scalars(
        select(SocialNetworkMetrics.student_id).where(SocialNetworkMetrics.class_name == "7B")
    )).all()
    assert sorted(stored) == ["s-1", "s-2"]


async def test_failed_write_rolls_back_and_session_stays_usable(seeded, session, session_factory):
    broken = NetworkMetrics(
        student_id="s-1", class_name="7B", centrality=None, betweenness=0.0, degree=1,
        isolation_risk=IsolationRisk.LOW, social_role=SocialRole.BRIDGE, influence_score=50.0,
        assessed_at=NOW,
    )
    good = NetworkMetrics(
        student_id="s-2", class_name="7B", centrality=0.5, betweenness=0.0, degree=1,
        isolation_risk=IsolationRisk.LOW, social_role=SocialRole.BRIDGE, influence_score=50.0,
        assessed_at=NOW,
    )

    with pytest.raises(IntegrityError):
        await seeded.upsert_network_metrics(broken)
    assert not session.in_transaction()

    await seeded.upsert_network_metrics(good)

    async with session_factory() as other:
        stored = (await other.scalars(select(SocialNetworkMetrics.student_id))).all()
    assert stored == ["s-2"]


async def test_student_groups_lists_active_memberships(seeded, session):
    session.add_all([
        SocialGroup(id=1, group_name="Robotics", class_name="7B", is_active=True),
        SocialGroup(id=2, group_name="Old choir", class_name="7B", is_active=False),
    ])
    session.add_all([
        SocialGroupMember(group_id=1, student_id="s-1", role="LEADER"),
        SocialGroupMember(group_id=1, student_id="s-2", role="MEMBER"),
        SocialGroupMember(group_id=1, student_id="s-3", role="MEMBER"),
        SocialGroupMember(group_id=2, student_id="s-1", role="MEMBER"),
    ])
    await session.commit()

    groups = await seeded.student_groups("s-1")

    assert groups == [PeerGroup(group_id="1", group_name="Robotics", role="LEADER", member_count=3)]
    assert await seeded.student_groups("s-9") == []

    service = InsightsService(source=seeded, writer=seeded, clock=fixed_clock(NOW))
    analysis = await service.student_network("s-2")
    assert [g.group_name for g in analysis.peer_groups] == ["Robotics"]


async def test_recompute_job_commits_every_student(seeded, session_factory):
    summary = await recompute(session_factory)

    assert summary == {"students": 3, "assessed": 3, "failed": 0, "classes": 2}
    async with session_factory() as s:
        rows = await s.scalar(select(func.count()).select_from(RiskScoreHistory))
        metrics = await s.scalar(select(func.count()).select_from(SocialNetworkMetrics))
    assert rows == 2 + 3
    assert metrics == 3
