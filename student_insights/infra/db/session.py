# student_insights/infra/db/session.py
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from student_insights.core.config import settings
from student_insights.infra.db.base import Base


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an async session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Creates the tables (development). Use migrations in production."""
    from student_insights.infra.db.models import (  # noqa: F401
        academic, attendance, behavior, network_metrics, peer_relationship,
        profiles, risk_history, social_group, student,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
