# student_insights/schemas/batch_schemas.py
from pydantic import BaseModel, Field
from typing import List


class BatchRiskRequest(BaseModel):
    """
    Student ids to assess in one call. With ``commit`` each successful assessment
    is also appended to the risk history.
    """

    student_ids: List[str] = Field(..., min_length=1, max_length=500, examples=[["s-001", "s-002"]])
    commit: bool = Field(False, description="Append every successful assessment to the history")
