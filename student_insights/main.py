# student_insights/main.py
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from slowapi.errors import RateLimitExceeded

from student_insights.api.v1.router import api_router_v1
from student_insights.core.config import Settings, get_settings
from student_insights.core.errors import StudentNotFoundError
from student_insights.core.logging import setup_logging
from student_insights.core.rate_limit import (
    build_limiter,
    build_limits,
    enforce_rate_limit,
    rate_limit_exceeded_handler,
)
from student_insights.infra.db.session import init_db


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        dependencies=[Depends(enforce_rate_limit)],
    )

    # Rate limiting
    app.state.limiter = build_limiter(settings)
    app.state.rate_limits = build_limits(settings)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_exception_handler(StudentNotFoundError, _student_not_found_handler)

    # Routers
    app.include_router(api_router_v1)

    @app.on_event("startup")
    async def on_startup() -> None:
        await init_db()

    @app.get("/")
    async def root():
        return {"service": settings.PROJECT_NAME, "status": "ok"}

    return app


def _student_not_found_handler(request: Request, exc: StudentNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc), "student_id": exc.student_id},
    )


app = create_app()
