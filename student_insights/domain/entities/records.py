# student_insights/domain/entities/records.py
"""
Read-only history records handed to the analytics core by a record source.

Every list is ordered newest first, already restricted to the look-back window
configured in ``ScoringConfig.windows``.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class BehaviorType(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class RelationshipType(str, Enum):
    FRIEND = "FRIEND"
    CLOSE_FRIEND = "CLOSE_FRIEND"
    ACQUAINTANCE = "ACQUAINTANCE"
    STUDY_PARTNER = "STUDY_PARTNER"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class StudentRecord:
    id: str
    name: str
    class_name: Optional[str] = None


@dataclass(frozen=True)
class ExamResult:
    exam_date: date
    total_score: Optional[float]
    exam_name: Optional[str] = None
    # subject name -> score, only subjects present on the exam
    subject_scores: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class BehaviorIncident:
    incident_date: date
    behavior_type: str
    behavior_category: str
    severity: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_negative(self) -> bool:
        return self.behavior_type != BehaviorType.POSITIVE.value


@dataclass(frozen=True)
class AttendanceRecord:
    date: date
    status: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class SocialEmotionalProfile:
    assessed_at: date
    empathy_level: Optional[int] = None
    emotion_regulation_level: Optional[int] = None
    conflict_resolution_level: Optional[int] = None
    leadership_level: Optional[int] = None
    teamwork_level: Optional[int] = None
    friend_circle_size: Optional[str] = None
    friend_circle_quality: Optional[str] = None
    bullying_status: Optional[str] = None
    social_integration_level: Optional[str] = None
    friendship_quality: Optional[str] = None
    peer_acceptance: Optional[int] = None


@dataclass(frozen=True)
class FamilyContextProfile:
    assessed_at: date
    parental_involvement_level: Optional[str] = None
    family_stability_level: Optional[str] = None
    communication_quality: Optional[str] = None


@dataclass(frozen=True)
class MotivationProfile:
    assessed_at: date
    intrinsic_motivation: Optional[int] = None
    extrinsic_motivation: Optional[int] = None
    goal_orientation: Optional[str] = None
    resilience_level: Optional[int] = None


@dataclass(frozen=True)
class HealthProfile:
    assessed_at: date
    chronic_conditions: List[str] = field(default_factory=list)
    health_concerns: Optional[str] = None
    medication_compliance: Optional[str] = None


@dataclass(frozen=True)
class TalentProfile:
    assessed_at: date
    creative_talents: List[str] = field(default_factory=list)
    physical_talents: List[str] = field(default_factory=list)
    primary_interests: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PeerRelationship:
    student_id: str
    peer_id: str
    relationship_type: str
    strength: int = 5

    @property
    def is_conflict(self) -> bool:
        return self.relationship_type == RelationshipType.CONFLICT.value


@dataclass(frozen=True)
class RiskHistoryEntry:
    student_id: str
    assessed_at: datetime
    overall_score: float
    risk_level: str
    factor_scores: Dict[str, float] = field(default_factory=dict)
    calculation_method: str = "WEIGHTED_HEURISTIC"


@dataclass
class StudentContext:
    """Everything the calculators and analyzers need for one student."""
    student: StudentRecord
    exams: List[ExamResult] = field(default_factory=list)
    incidents: List[BehaviorIncident] = field(default_factory=list)
    attendance: List[AttendanceRecord] = field(default_factory=list)
    social_emotional: Optional[SocialEmotionalProfile] = None
    family: Optional[FamilyContextProfile] = None
    motivation: Optional[MotivationProfile] = None
    health: Optional[HealthProfile] = None
    talents: Optional[TalentProfile] = None
    peer_relationships: List[PeerRelationship] = field(default_factory=list)
    risk_history: List[RiskHistoryEntry] = field(default_factory=list)

    @property
    def student_id(self) -> str:
        return self.student.id

    def populated_domains(self) -> int:
        """How many of the eight scoring sources returned at least one record."""
        sources = [
            self.exams,
            self.incidents,
            self.attendance,
            self.social_emotional,
            self.family,
            self.motivation,
            self.health,
            self.talents,
        ]
        return sum(1 for s in sources if s)
