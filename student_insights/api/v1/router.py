# student_insights/api/v1/router.py
from fastapi import APIRouter

from student_insights.api.v1.endpoints.health import router as health_router
from student_insights.api.v1.endpoints.risk import router as risk_router
from student_insights.api.v1.endpoints.patterns import router as patterns_router
from student_insights.api.v1.endpoints.network import router as network_router


api_router_v1 = APIRouter(prefix="/api/v1")

api_router_v1.include_router(health_router)
api_router_v1.include_router(risk_router)
api_router_v1.include_router(patterns_router)
api_router_v1.include_router(network_router)
