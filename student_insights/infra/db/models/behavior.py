# student_insights/infra/db/models/behavior.py
from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text

from student_insights.infra.db.base import Base


class BehaviorIncident(Base):
    __tablename__ = "behavior_incidents"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    incident_date = Column(Date, nullable=False, index=True)
    behavior_type = Column(String(20), nullable=False)  # POSITIVE | NEGATIVE | NEUTRAL
    behavior_category = Column(String(80), nullable=False)
    severity = Column(String(20), nullable=True)  # LOW | MEDIUM | HIGH
    description = Column(Text, nullable=True)
