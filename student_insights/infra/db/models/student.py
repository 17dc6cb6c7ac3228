# student_insights/infra/db/models/student.py
from sqlalchemy import Column, DateTime, String, func

from student_insights.infra.db.base import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    class_name = Column(String(50), index=True, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
