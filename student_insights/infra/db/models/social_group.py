# student_insights/infra/db/models/social_group.py
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from student_insights.infra.db.base import Base


class SocialGroup(Base):
    __tablename__ = "social_groups"

    id = Column(Integer, primary_key=True)
    group_name = Column(String(120), nullable=False)
    class_name = Column(String(20), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)


class SocialGroupMember(Base):
    __tablename__ = "social_group_members"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("social_groups.id"), nullable=False, index=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="MEMBER")
