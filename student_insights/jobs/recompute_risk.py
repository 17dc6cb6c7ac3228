# student_insights/jobs/recompute_risk.py
"""
Nightly recomputation: assesses every student, appends the snapshots to the risk
history and refreshes the stored network metrics of every class.

    python -m student_insights.jobs.recompute_risk
"""
import asyncio
import logging

from student_insights.core.logging import setup_logging
from student_insights.domain.services.insights_service import InsightsService, failed_ids
from student_insights.infra.db.session import AsyncSessionLocal, init_db
from student_insights.infra.repositories.student_records import SqlRecordStore

logger = logging.getLogger(__name__)


async def recompute(session_factory=AsyncSessionLocal) -> dict:
    async with session_factory() as session:
        store = SqlRecordStore(session)
        service = InsightsService(source=store, writer=store)

        students = await store.list_students()
        logger.info("Recomputing risk for %d students", len(students))
        result = await service.assess_batch([s.id for s in students], commit=True)
        if result.failed:
            logger.warning("Students without a fresh assessment: %s", ", ".join(failed_ids(result)))

        classes = await store.list_classes()
        for class_name in classes:
            network = await service.class_network(class_name)
            logger.info(
                "Class %s: %d students, density %.3f, %d isolated",
                class_name,
                network.total_students,
                network.density,
                len(network.isolated_students),
            )

    summary = {
        "students": result.total,
        "assessed": len(result.succeeded),
        "failed": len(result.failed),
        "classes": len(classes),
    }
    logger.info("Recompute finished: %s", summary)
    return summary


def run():
    setup_logging()
    asyncio.run(_main())


async def _main():
    await init_db()
    await recompute()


if __name__ == "__main__":
    run()
