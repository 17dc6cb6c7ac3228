# student_insights/api/v1/endpoints/network.py
from fastapi import APIRouter, Depends

from student_insights.api.deps import get_insights_service
from student_insights.core.security import get_api_key
from student_insights.domain.services.insights_service import InsightsService

router = APIRouter(tags=["network"], dependencies=[Depends(get_api_key)])


@router.get("/students/{student_id}/network")
async def student_network(student_id: str, service: InsightsService = Depends(get_insights_service)):
    return await service.student_network(student_id)


@router.get("/classes/{class_name}/network")
async def class_network(class_name: str, service: InsightsService = Depends(get_insights_service)):
    return await service.class_network(class_name)
