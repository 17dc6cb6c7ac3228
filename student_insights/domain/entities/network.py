# student_insights/domain/entities/network.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class IsolationRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SocialRole(str, Enum):
    LEADER = "LEADER"
    BRIDGE = "BRIDGE"
    FOLLOWER = "FOLLOWER"
    ISOLATE = "ISOLATE"
    PERIPHERAL = "PERIPHERAL"


@dataclass(frozen=True)
class NetworkMetrics:
    student_id: str
    class_name: str
    centrality: float
    betweenness: float
    degree: int
    isolation_risk: IsolationRisk
    social_role: SocialRole
    influence_score: float
    assessed_at: datetime


@dataclass(frozen=True)
class RelationshipBreakdown:
    total_connections: int = 0
    close_friends: int = 0
    friends: int = 0
    acquaintances: int = 0
    study_partners: int = 0
    conflicts: int = 0


@dataclass(frozen=True)
class SocialInsight:
    kind: str  # "strength" | "concern" | "opportunity"
    title: str
    description: str
    recommendation: str


@dataclass(frozen=True)
class ClassPositioning:
    popularity_percentile: float
    integration_level: str
    peer_acceptance: int


@dataclass(frozen=True)
class PeerGroup:
    group_id: str
    group_name: str
    role: str
    member_count: int


@dataclass(frozen=True)
class StudentNetworkAnalysis:
    student_id: str
    student_name: str
    class_name: str
    metrics: NetworkMetrics
    relationships: RelationshipBreakdown
    positioning: ClassPositioning
    social_insights: List[SocialInsight] = field(default_factory=list)
    peer_groups: List[PeerGroup] = field(default_factory=list)


@dataclass(frozen=True)
class Cluster:
    cluster_id: str
    members: List[str]
    cohesion: float
    size: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "size", len(self.members))


@dataclass(frozen=True)
class IsolatedStudent:
    student_id: str
    student_name: str
    isolation_risk: IsolationRisk


@dataclass(frozen=True)
class CentralFigure:
    student_id: str
    student_name: str
    role: SocialRole
    influence: float


@dataclass(frozen=True)
class ConflictPair:
    student_id: str
    peer_id: str
    severity: int


@dataclass(frozen=True)
class ClassNetwork:
    class_name: str
    analyzed_at: datetime
    total_students: int
    density: float
    clusters: List[Cluster] = field(default_factory=list)
    isolated_students: List[IsolatedStudent] = field(default_factory=list)
    central_figures: List[CentralFigure] = field(default_factory=list)
    conflict_pairs: List[ConflictPair] = field(default_factory=list)
