# student_insights/infra/db/models/academic.py
from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String

from student_insights.infra.db.base import Base

# column -> subject label used in pattern insights
SUBJECT_COLUMNS = {
    "language_score": "Language",
    "math_score": "Mathematics",
    "science_score": "Science",
    "social_score": "Social Studies",
    "foreign_language_score": "Foreign Language",
}


class ExamResult(Base):
    __tablename__ = "exam_results"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    exam_date = Column(Date, nullable=False, index=True)
    exam_name = Column(String(200))
    total_score = Column(Float, nullable=True)

    language_score = Column(Float, nullable=True)
    math_score = Column(Float, nullable=True)
    science_score = Column(Float, nullable=True)
    social_score = Column(Float, nullable=True)
    foreign_language_score = Column(Float, nullable=True)
