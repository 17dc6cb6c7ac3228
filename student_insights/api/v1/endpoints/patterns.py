# student_insights/api/v1/endpoints/patterns.py
from fastapi import APIRouter, Depends

from student_insights.api.deps import get_insights_service
from student_insights.core.security import get_api_key
from student_insights.domain.services.insights_service import InsightsService

router = APIRouter(tags=["patterns"], dependencies=[Depends(get_api_key)])


@router.get("/students/{student_id}/patterns")
async def student_patterns(student_id: str, service: InsightsService = Depends(get_insights_service)):
    formatted = await service.patterns(student_id)
    return {
        "student_id": student_id,
        "critical": formatted.critical,
        "warning": formatted.warning,
        "info": formatted.info,
        # critical first, then warning, then info
        "insights": formatted.ordered,
    }
