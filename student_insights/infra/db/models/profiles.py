# student_insights/infra/db/models/profiles.py
"""
Assessment snapshots; the latest row per student is the current profile.
List-valued fields are stored as JSON text.
"""
from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text

from student_insights.infra.db.base import Base


class SocialEmotionalProfile(Base):
    __tablename__ = "social_emotional_profiles"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(Date, nullable=False)

    # 1-5 scales
    empathy_level = Column(Integer)
    emotion_regulation_level = Column(Integer)
    conflict_resolution_level = Column(Integer)
    leadership_level = Column(Integer)
    teamwork_level = Column(Integer)

    friend_circle_size = Column(String(20))  # NONE | FEW | MODERATE | LARGE
    friend_circle_quality = Column(String(20))
    bullying_status = Column(String(20))  # NONE | VICTIM | PERPETRATOR | BOTH | OBSERVER
    social_integration_level = Column(String(30))
    friendship_quality = Column(String(20))
    peer_acceptance = Column(Integer)  # 1-10


class FamilyContextProfile(Base):
    __tablename__ = "family_context_profiles"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(Date, nullable=False)

    parental_involvement_level = Column(String(20))  # LOW | MEDIUM | HIGH
    family_stability_level = Column(String(20))  # STABLE | TRANSITIONING | UNSTABLE
    communication_quality = Column(String(20))  # GOOD | MIXED | PROBLEMATIC


class MotivationProfile(Base):
    __tablename__ = "motivation_profiles"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(Date, nullable=False)

    intrinsic_motivation = Column(Integer)
    extrinsic_motivation = Column(Integer)
    goal_orientation = Column(String(30))
    resilience_level = Column(Integer)


class HealthProfile(Base):
    __tablename__ = "health_profiles"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(Date, nullable=False)

    chronic_conditions = Column(Text)  # JSON list
    medication_compliance = Column(String(20))
    health_concerns = Column(Text)


class TalentProfile(Base):
    __tablename__ = "talent_profiles"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(Date, nullable=False)

    creative_talents = Column(Text)  # JSON list
    physical_talents = Column(Text)  # JSON list
    primary_interests = Column(Text)  # JSON list
