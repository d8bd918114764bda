"""HTTP routes. JSON API under /api; the workbook upload keeps its top-level path."""

from fastapi import APIRouter

from certportal.api import auth, health, records, templates, upload

router = APIRouter()
router.include_router(auth.router, prefix="/api", tags=["auth"])
router.include_router(templates.router, prefix="/api/template", tags=["template"])
router.include_router(records.router, prefix="/api", tags=["records"])
router.include_router(health.router, prefix="/api/health", tags=["health"])
router.include_router(upload.router, tags=["upload"])
