"""
Report export API package initialization.

This package contains FastAPI router modules for the report export service:
- reports: PDF snapshot export and download for published report weeks
"""

from fastapi import APIRouter

from report_export.api.reports import router as reports_router

# Create main API router
api_router = APIRouter()

api_router.include_router(reports_router, prefix="/reports", tags=["reports"])

__all__ = [
    "api_router",
    "reports_router",
]
