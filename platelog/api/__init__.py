"""API routes package."""

from fastapi import APIRouter

from platelog.api.routes import auth, employees, reports, scans, settings, vehicles

# Main API router
api_router = APIRouter(prefix="/api/v1")

# Include route modules
api_router.include_router(scans.router)
api_router.include_router(employees.router)
api_router.include_router(vehicles.router)
api_router.include_router(reports.router)
api_router.include_router(settings.router)
api_router.include_router(auth.router)
