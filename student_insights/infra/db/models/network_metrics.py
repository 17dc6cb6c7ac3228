# student_insights/infra/db/models/network_metrics.py
from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint

from student_insights.infra.db.base import Base


class SocialNetworkMetrics(Base):
    __tablename__ = "social_network_metrics"
    __table_args__ = (
        UniqueConstraint("student_id", "class_name", name="uq_network_metrics_student_class"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), nullable=False, index=True)
    class_name = Column(String(50), nullable=False, index=True)
    assessment_date = Column(DateTime, nullable=False)

    centrality_score = Column(Float, nullable=False)
    betweenness_score = Column(Float, nullable=False)
    degree_count = Column(Integer, nullable=False)
    isolation_risk = Column(String(20), nullable=False)
    social_role = Column(String(20), nullable=False)
    influence_score = Column(Float, nullable=False)
