# student_insights/infra/db/models/risk_history.py
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text

from student_insights.infra.db.base import Base


class RiskScoreHistory(Base):
    """Append-only; rows are never updated."""
    __tablename__ = "risk_score_history"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    assessment_date = Column(DateTime, nullable=False, index=True)

    academic_score = Column(Float)
    behavioral_score = Column(Float)
    attendance_score = Column(Float)
    social_emotional_score = Column(Float)
    overall_risk_score = Column(Float, nullable=False)
    risk_level = Column(String(20), nullable=False)
    factor_scores = Column(Text)  # JSON object with all eight factors
    confidence = Column(Float)
    calculation_method = Column(String(40), default="WEIGHTED_HEURISTIC")
