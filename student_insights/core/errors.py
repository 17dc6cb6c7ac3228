# student_insights/core/errors.py


class StudentInsightsError(Exception):
    """Base error for the analytics service."""


class StudentNotFoundError(StudentInsightsError):
    def __init__(self, student_id: str):
        super().__init__(f"Student not found: {student_id}")
        self.student_id = student_id
