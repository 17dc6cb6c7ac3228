# student_insights/api/deps.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_insights.domain.services.insights_service import InsightsService
from student_insights.infra.db.session import get_db
from student_insights.infra.repositories.student_records import SqlRecordStore


async def get_insights_service(db: AsyncSession = Depends(get_db)) -> InsightsService:
    store = SqlRecordStore(db)
    return InsightsService(source=store, writer=store)
