# student_insights/infra/db/models/attendance.py
from sqlalchemy import Column, Date, ForeignKey, Integer, String

from student_insights.infra.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False)  # PRESENT | ABSENT | LATE | EXCUSED
    reason = Column(String(255), nullable=True)
