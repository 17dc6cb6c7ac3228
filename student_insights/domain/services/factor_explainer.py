# student_insights/domain/services/factor_explainer.py
from typing import Dict, List, Optional

from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.records import SocialEmotionalProfile, TalentProfile
from student_insights.domain.entities.risk import (
    FactorScores,
    FactorSeverity,
    KeyRiskFactor,
    ProtectiveFactor,
)

FACTOR_LABELS: Dict[str, str] = {
    "academic": "Academic Performance",
    "behavioral": "Behavioral Issues",
    "attendance": "Attendance",
    "social_emotional": "Social-Emotional Development",
    "family_support": "Family Support",
    "peer_relations": "Peer Relations",
    "motivation": "Motivation",
    "health": "Health",
}

FACTOR_DESCRIPTIONS: Dict[str, str] = {
    "academic": "Academic achievement shows {pct}% risk",
    "behavioral": "Behavioral problems are at {pct}% level",
    "attendance": "Absenteeism carries {pct}% risk",
    "social_emotional": "Social-emotional development shows {pct}% risk",
    "family_support": "Family support is {pct}% insufficient",
    "peer_relations": "Peer relationship problems detected at {pct}%",
    "motivation": "Low motivation at {pct}% level",
    "health": "Health concerns contribute {pct}% risk",
}

FACTOR_RECOMMENDATIONS: Dict[str, str] = {
    "academic": "Create an individual academic support plan and assess learning difficulties",
    "behavioral": "Run a behavior analysis and apply positive behavior support (PBS) strategies",
    "attendance": "Meet with the family and investigate the reasons for absences",
    "social_emotional": "Enroll the student in a social-emotional learning (SEL) program",
    "family_support": "Arrange family counseling and parent education",
    "peer_relations": "Provide social skills training and a peer support program",
    "motivation": "Identify sources of motivation and set achievable goals",
    "health": "Monitor health status and refer to a health professional if needed",
}

_SEVERITY_RANK = {
    FactorSeverity.CRITICAL: 4,
    FactorSeverity.HIGH: 3,
    FactorSeverity.MEDIUM: 2,
    FactorSeverity.LOW: 1,
}


def factor_severity(score: float, config: ScoringConfig = DEFAULT_SCORING) -> FactorSeverity:
    if score > config.severity.critical_above:
        return FactorSeverity.CRITICAL
    if score > config.severity.high_above:
        return FactorSeverity.HIGH
    return FactorSeverity.MEDIUM


def identify_key_risk_factors(
    scores: FactorScores,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[KeyRiskFactor]:
    factors: List[KeyRiskFactor] = []
    for key, score in scores.as_dict().items():
        if score <= config.severity.include_above:
            continue
        pct = round(score * 100)
        factors.append(
            KeyRiskFactor(
                factor=key,
                label=FACTOR_LABELS.get(key, key),
                severity=factor_severity(score, config),
                score=score,
                description=FACTOR_DESCRIPTIONS.get(key, "Risk level: {pct}%").format(pct=pct),
                recommendation=FACTOR_RECOMMENDATIONS.get(key, "Run a detailed assessment"),
            )
        )

    # stable: equal severities keep the factor order
    return sorted(factors, key=lambda f: _SEVERITY_RANK[f.severity], reverse=True)


def identify_protective_factors(
    talents: Optional[TalentProfile],
    social_emotional: Optional[SocialEmotionalProfile],
) -> List[ProtectiveFactor]:
    factors: List[ProtectiveFactor] = []

    if talents is not None:
        if talents.creative_talents:
            factors.append(
                ProtectiveFactor(
                    factor="Creative Talents",
                    strength=8,
                    description=f"Talented in {', '.join(talents.creative_talents)}",
                )
            )
        if talents.physical_talents:
            factors.append(
                ProtectiveFactor(
                    factor="Physical Talents",
                    strength=7,
                    description=f"Active in {', '.join(talents.physical_talents)}",
                )
            )

    if social_emotional is not None:
        leadership = social_emotional.leadership_level or 0
        empathy = social_emotional.empathy_level or 0
        if leadership >= 4:
            factors.append(
                ProtectiveFactor(
                    factor="Leadership",
                    strength=leadership * 2,
                    description="Shows strong leadership skills",
                )
            )
        if empathy >= 4:
            factors.append(
                ProtectiveFactor(
                    factor="Empathy",
                    strength=empathy * 2,
                    description="Shows a high capacity for empathy",
                )
            )

    return factors
