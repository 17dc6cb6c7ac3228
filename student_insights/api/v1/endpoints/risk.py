# student_insights/api/v1/endpoints/risk.py
from fastapi import APIRouter, Depends

from student_insights.api.deps import get_insights_service
from student_insights.core.security import get_api_key
from student_insights.domain.services.insights_service import InsightsService
from student_insights.schemas.batch_schemas import BatchRiskRequest

router = APIRouter(tags=["risk"], dependencies=[Depends(get_api_key)])


@router.get("/students/{student_id}/risk")
async def student_risk(student_id: str, service: InsightsService = Depends(get_insights_service)):
    return await service.assess(student_id)


@router.post("/students/{student_id}/risk/history", status_code=201)
async def commit_student_risk(student_id: str, service: InsightsService = Depends(get_insights_service)):
    """Computes a fresh assessment and appends it to the student's risk history."""
    return await service.commit_to_history(student_id)


@router.get("/students/{student_id}/risk/trend")
async def student_risk_trend(student_id: str, service: InsightsService = Depends(get_insights_service)):
    return await service.trend(student_id)


@router.post("/risk/batch")
async def batch_risk(payload: BatchRiskRequest, service: InsightsService = Depends(get_insights_service)):
    result = await service.assess_batch(payload.student_ids, commit=payload.commit)
    return {
        "total": result.total,
        "succeeded": result.succeeded,
        "failed": result.failed,
    }
