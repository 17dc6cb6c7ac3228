# student_insights/api/v1/endpoints/health.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from student_insights.core.clock import utc_now
from student_insights.core.config import settings
from student_insights.infra.db.session import get_db
from student_insights.schemas.health_schemas import HealthResponse, PageInfo, StatusObject, ComponentStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    t = utc_now().isoformat() + "Z"

    try:
        await db.execute(text("SELECT 1"))
        db_status = ComponentStatus(status="operational", detail="Database connection OK")
    except Exception as e:
        db_status = ComponentStatus(status="major_outage", detail=f"Database error: {e}")

    if db_status.status != "operational":
        indicator = "major_outage"
        desc = "Database unavailable."
    else:
        indicator = "operational"
        desc = "All systems functional."

    return HealthResponse(
        page=PageInfo(
            name=settings.PROJECT_NAME,
            version=settings.PROJECT_VERSION,
            time=t,
        ),
        status=StatusObject(
            indicator=indicator,
            description=desc,
        ),
        components={
            "database": db_status,
        },
    )
