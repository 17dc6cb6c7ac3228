# student_insights/domain/services/social_network.py
"""
Peer-network positioning for students and classes.

Edges are directed as recorded (``student_id`` reports a relationship with
``peer_id``). Betweenness is a two-hop approximation, O(n^2) per class: the share of
distinct two-hop non-conflict (source, target) pairs in the class that can route
through the student. It is not exact betweenness centrality; the role and isolation
thresholds are tuned against this approximation.
"""
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.network import (
    CentralFigure,
    ClassNetwork,
    ClassPositioning,
    Cluster,
    ConflictPair,
    IsolatedStudent,
    IsolationRisk,
    NetworkMetrics,
    PeerGroup,
    RelationshipBreakdown,
    SocialInsight,
    SocialRole,
    StudentNetworkAnalysis,
)
from student_insights.domain.entities.records import (
    PeerRelationship,
    RelationshipType,
    StudentRecord,
)

_CLUSTER_TYPES = (RelationshipType.FRIEND.value, RelationshipType.CLOSE_FRIEND.value)


def _adjacency(edges: Iterable[PeerRelationship]) -> Dict[str, Set[str]]:
    adj: Dict[str, Set[str]] = defaultdict(set)
    for e in edges:
        if not e.is_conflict and e.student_id != e.peer_id:
            adj[e.student_id].add(e.peer_id)
    return adj


# ==========================================================
#  PER-STUDENT METRICS
# ==========================================================

def degree(student_id: str, edges: Iterable[PeerRelationship]) -> int:
    return len({e.peer_id for e in edges if e.student_id == student_id and not e.is_conflict})


def centrality(degree_count: int, class_size: int) -> float:
    return degree_count / (class_size - 1) if class_size > 1 else 0.0


def betweenness(student_id: str, class_ids: Set[str], edges: Iterable[PeerRelationship]) -> float:
    adj = _adjacency(e for e in edges if e.student_id in class_ids and e.peer_id in class_ids)

    all_pairs: Set[Tuple[str, str]] = set()
    for source, middles in adj.items():
        if source == student_id:
            continue
        for middle in middles:
            for target in adj.get(middle, ()):
                if target not in (source, student_id):
                    all_pairs.add((source, target))

    if not all_pairs:
        return 0.0

    through: Set[Tuple[str, str]] = set()
    outgoing = adj.get(student_id, set())
    for source, middles in adj.items():
        if student_id in middles:
            for target in outgoing:
                if target != source:
                    through.add((source, target))

    return len(through) / len(all_pairs)


def determine_isolation_risk(
    degree_count: int,
    class_size: int,
    config: ScoringConfig = DEFAULT_SCORING,
) -> IsolationRisk:
    cfg = config.network
    if degree_count == 0:
        return IsolationRisk.CRITICAL
    ratio = degree_count / max(1, class_size - 1)
    if ratio < cfg.isolation_high_below:
        return IsolationRisk.HIGH
    if ratio < cfg.isolation_medium_below:
        return IsolationRisk.MEDIUM
    return IsolationRisk.LOW


def determine_social_role(
    degree_count: int,
    centrality_score: float,
    config: ScoringConfig = DEFAULT_SCORING,
) -> SocialRole:
    cfg = config.network
    if degree_count == 0:
        return SocialRole.ISOLATE
    if centrality_score > cfg.leader_above:
        return SocialRole.LEADER
    if centrality_score > cfg.bridge_above:
        return SocialRole.BRIDGE
    if centrality_score > cfg.follower_above:
        return SocialRole.FOLLOWER
    return SocialRole.PERIPHERAL


def calculate_network_metrics(
    student_id: str,
    class_name: str,
    class_ids: Set[str],
    edges: Sequence[PeerRelationship],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> NetworkMetrics:
    class_size = len(class_ids)
    deg = degree(student_id, edges)
    cent = centrality(deg, class_size)
    return NetworkMetrics(
        student_id=student_id,
        class_name=class_name,
        centrality=cent,
        betweenness=betweenness(student_id, class_ids, edges),
        degree=deg,
        isolation_risk=determine_isolation_risk(deg, class_size, config),
        social_role=determine_social_role(deg, cent, config),
        influence_score=cent * 100,
        assessed_at=now,
    )


def calculate_class_metrics(
    class_name: str,
    roster: Sequence[StudentRecord],
    edges: Sequence[PeerRelationship],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> Dict[str, NetworkMetrics]:
    class_ids = {s.id for s in roster}
    return {
        s.id: calculate_network_metrics(s.id, class_name, class_ids, edges, now, config)
        for s in roster
    }


# ==========================================================
#  PER-STUDENT VIEW
# ==========================================================

def relationship_breakdown(student_id: str, edges: Iterable[PeerRelationship]) -> RelationshipBreakdown:
    counts: Dict[str, int] = defaultdict(int)
    total = 0
    for e in edges:
        if e.student_id == student_id:
            counts[e.relationship_type] += 1
            total += 1
    return RelationshipBreakdown(
        total_connections=total,
        close_friends=counts[RelationshipType.CLOSE_FRIEND.value],
        friends=counts[RelationshipType.FRIEND.value],
        acquaintances=counts[RelationshipType.ACQUAINTANCE.value],
        study_partners=counts[RelationshipType.STUDY_PARTNER.value],
        conflicts=counts[RelationshipType.CONFLICT.value],
    )


def generate_social_insights(
    relationships: RelationshipBreakdown,
    metrics: NetworkMetrics,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[SocialInsight]:
    cfg = config.network
    insights: List[SocialInsight] = []

    if metrics.isolation_risk in (IsolationRisk.CRITICAL, IsolationRisk.HIGH):
        insights.append(SocialInsight(
            kind="concern",
            title="Social Isolation Risk",
            description=(
                f"The student has {relationships.total_connections} connections in class, "
                "which is critically low"
            ),
            recommendation="Provide social integration support now; involve them in group activities and peer support.",
        ))

    if metrics.social_role == SocialRole.LEADER:
        insights.append(SocialInsight(
            kind="strength",
            title="Leadership Position",
            description="The student holds a leading position in class with high social influence",
            recommendation="Guide them to use leadership positively; offer peer mentoring opportunities.",
        ))

    if relationships.conflicts > cfg.conflict_concern_above:
        insights.append(SocialInsight(
            kind="concern",
            title="Conflicts",
            description=f"{relationships.conflicts} conflict relationships detected",
            recommendation="Work on conflict resolution skills and offer mediation.",
        ))

    if relationships.close_friends >= cfg.close_friends_strength:
        insights.append(SocialInsight(
            kind="strength",
            title="Strong Friendship Network",
            description=f"{relationships.close_friends} close friendships",
            recommendation="Keep this social support in place; encourage collaboration with these friends.",
        ))

    if 0 < relationships.total_connections < cfg.small_network_below:
        insights.append(SocialInsight(
            kind="opportunity",
            title="Room To Grow The Network",
            description="Limited social connections with potential to expand",
            recommendation="Encourage joining different group activities and meeting peers with shared interests.",
        ))

    return insights


def calculate_class_positioning(
    student_id: str,
    class_metrics: Dict[str, NetworkMetrics],
    config: ScoringConfig = DEFAULT_SCORING,
) -> ClassPositioning:
    cfg = config.network
    ranked = sorted(class_metrics.values(), key=lambda m: m.degree, reverse=True)
    ids = [m.student_id for m in ranked]

    if student_id in ids:
        percentile = (len(ids) - ids.index(student_id)) / len(ids) * 100
        connections = class_metrics[student_id].degree
    else:
        percentile = 50.0
        connections = 0

    if connections == 0:
        integration = "very low"
    elif connections < cfg.low_integration_degree:
        integration = "low"
    elif connections >= cfg.high_integration_degree:
        integration = "high"
    else:
        integration = "moderate"

    return ClassPositioning(
        popularity_percentile=percentile,
        integration_level=integration,
        peer_acceptance=min(10, connections),
    )


def analyze_student_network(
    student: StudentRecord,
    roster: Sequence[StudentRecord],
    edges: Sequence[PeerRelationship],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
    peer_groups: Sequence[PeerGroup] = (),
) -> StudentNetworkAnalysis:
    class_name = student.class_name or ""
    if student.id not in {s.id for s in roster}:
        roster = [*roster, student]
    class_metrics = calculate_class_metrics(class_name, roster, edges, now, config)
    metrics = class_metrics[student.id]
    relationships = relationship_breakdown(student.id, edges)

    return StudentNetworkAnalysis(
        student_id=student.id,
        student_name=student.name,
        class_name=class_name,
        metrics=metrics,
        relationships=relationships,
        positioning=calculate_class_positioning(student.id, class_metrics, config),
        social_insights=generate_social_insights(relationships, metrics, config),
        peer_groups=list(peer_groups),
    )


# ==========================================================
#  CLASS VIEW
# ==========================================================

def network_density(class_ids: Set[str], edges: Iterable[PeerRelationship]) -> float:
    n = len(class_ids)
    possible = n * (n - 1)
    if possible <= 0:
        return 0.0
    actual = sum(1 for e in edges if e.student_id in class_ids and not e.is_conflict)
    return actual / possible


def cluster_cohesion(members: Sequence[str], edges: Iterable[PeerRelationship]) -> float:
    size = len(members)
    if size <= 1:
        return 0.0
    member_set = set(members)
    internal = sum(1 for e in edges if e.student_id in member_set and e.peer_id in member_set)
    return internal / (size * (size - 1))


def identify_clusters(
    class_ids: Set[str],
    edges: Sequence[PeerRelationship],
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[Cluster]:
    """Groups reachable over strong friendships, following edge direction."""
    friendships = [
        e for e in edges
        if e.student_id in class_ids
        and e.relationship_type in _CLUSTER_TYPES
        and e.strength >= config.network.cluster_min_strength
    ]
    adj: Dict[str, List[str]] = defaultdict(list)
    for e in friendships:
        adj[e.student_id].append(e.peer_id)

    clusters: List[Cluster] = []
    processed: Set[str] = set()

    for e in friendships:
        if e.student_id in processed:
            continue
        members = [e.student_id]
        processed.add(e.student_id)
        stack = [e.student_id]
        while stack:
            current = stack.pop()
            for peer in adj.get(current, ()):
                if peer not in processed:
                    processed.add(peer)
                    members.append(peer)
                    stack.append(peer)

        if len(members) > 1:
            clusters.append(Cluster(
                cluster_id=f"cluster_{len(clusters) + 1}",
                members=members,
                cohesion=cluster_cohesion(members, friendships),
            ))

    return clusters


def identify_conflicts(class_ids: Set[str], edges: Iterable[PeerRelationship]) -> List[ConflictPair]:
    conflicts = [
        ConflictPair(student_id=e.student_id, peer_id=e.peer_id, severity=e.strength)
        for e in edges
        if e.student_id in class_ids and e.is_conflict
    ]
    return sorted(conflicts, key=lambda c: c.severity, reverse=True)


def analyze_class_network(
    class_name: str,
    roster: Sequence[StudentRecord],
    edges: Sequence[PeerRelationship],
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> Tuple[ClassNetwork, Dict[str, NetworkMetrics]]:
    """Returns the class view plus the per-student metrics it was derived from."""
    class_ids = {s.id for s in roster}
    names = {s.id: s.name for s in roster}
    metrics = calculate_class_metrics(class_name, roster, edges, now, config)

    isolated = [
        IsolatedStudent(student_id=m.student_id, student_name=names[m.student_id], isolation_risk=m.isolation_risk)
        for m in metrics.values()
        if m.degree == 0 or m.isolation_risk in (IsolationRisk.HIGH, IsolationRisk.CRITICAL)
    ]

    central = sorted(
        (m for m in metrics.values() if m.social_role in (SocialRole.LEADER, SocialRole.BRIDGE)),
        key=lambda m: m.influence_score,
        reverse=True,
    )[: config.network.central_figures_limit]

    network = ClassNetwork(
        class_name=class_name,
        analyzed_at=now,
        total_students=len(roster),
        density=network_density(class_ids, edges),
        clusters=identify_clusters(class_ids, edges, config),
        isolated_students=isolated,
        central_figures=[
            CentralFigure(
                student_id=m.student_id,
                student_name=names[m.student_id],
                role=m.social_role,
                influence=m.influence_score,
            )
            for m in central
        ],
        conflict_pairs=identify_conflicts(class_ids, edges),
    )
    return network, metrics
