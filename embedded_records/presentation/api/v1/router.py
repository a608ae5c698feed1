"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from embedded_records.presentation.api.v1.endpoints.health import router as health_router
from embedded_records.presentation.api.v1.endpoints.containers import router as containers_router
from embedded_records.presentation.api.v1.endpoints.editors import router as editors_router
from embedded_records.presentation.api.v1.endpoints.groups import router as groups_router
from embedded_records.presentation.api.v1.endpoints.events import router as events_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(containers_router)
router.include_router(editors_router)
router.include_router(groups_router)
router.include_router(events_router)
