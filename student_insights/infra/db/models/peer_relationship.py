# student_insights/infra/db/models/peer_relationship.py
from sqlalchemy import Column, ForeignKey, Integer, String

from student_insights.infra.db.base import Base


class PeerRelationship(Base):
    __tablename__ = "peer_relationships"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    peer_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    relationship_type = Column(String(20), nullable=False)
    relationship_strength = Column(Integer, nullable=False, default=5)  # 1-10
