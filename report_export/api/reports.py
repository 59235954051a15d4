"""
FastAPI router module for report PDF export.

Key Endpoints:
- POST /reports/{report_week_id}/pdf - Generate (or reuse) the PDF snapshot of
  a published report week and return its download URL
- GET /reports/{report_week_id}/pdf - Stream the cached PDF

Access Rules:
- The calling tenant comes from the X-Tenant-Id header (see get_tenant_id);
  a missing tenant context is rejected with 403.
- A report week that does not exist for the tenant is 404. Weeks owned by
  other tenants are indistinguishable from missing ones.
- Only published weeks can be exported (403 otherwise).

Response Contracts:
- POST: { "success": true, "data": { "downloadUrl": "/reports/{id}/pdf" } }
- GET: application/pdf, Content-Disposition: attachment; filename="report-{id}.pdf"
- Errors: HTTPException detail; unexpected failures are logged and returned
  as 500 with a generic message.
"""

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from report_export.core.dependencies import ExporterDep, TenantIdDep
from report_export.models.schemas import ExportDownload, ExportResponse
from report_export.services.export import ReportWeekNotFoundError, get_cached_export
from report_export.services.report_weeks import fetch_report_week


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_MEDIA_TYPE = 'application/pdf'


# =============================================================================
# Helper Functions
# =============================================================================


def _download_url(report_week_id: str) -> str:
    return f"/reports/{report_week_id}/pdf"


def _require_valid_id(report_week_id: str) -> None:
    """Reject ids that cannot name a report week (uuid primary key) as not found."""
    try:
        uuid.UUID(report_week_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Report not found")


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/{report_week_id}/pdf", response_model=ExportResponse)
async def export_report_pdf(
    report_week_id: str,
    tenant_id: TenantIdDep,
    exporter: ExporterDep
) -> ExportResponse:
    """
    Generate or return the cached PDF for a published report week.

    Args:
        report_week_id: Report week to export.
        tenant_id: Calling tenant (X-Tenant-Id).
        exporter: Shared ReportExporter.

    Returns:
        ExportResponse with the download URL.

    Raises:
        HTTPException: 404 if the week is unknown for the tenant, 403 if it is
            not published, 500 on unexpected errors.
    """
    _require_valid_id(report_week_id)

    try:
        report_week = await fetch_report_week(report_week_id, tenant_id)
        if report_week is None:
            logger.warning(f"PDF export rejected: report week {report_week_id} not found for tenant {tenant_id}")
            raise HTTPException(status_code=404, detail="Report not found")

        if not report_week.is_published:
            logger.warning(f"PDF export rejected: report week {report_week_id} is {report_week.status.value}")
            raise HTTPException(
                status_code=403,
                detail="Only published reports can be exported as PDF"
            )

        pdf_path = await exporter.export_report(tenant_id, report_week_id)
        logger.info(f"PDF export ready for {tenant_id}/{report_week_id}: {pdf_path}")

        return ExportResponse(data=ExportDownload(downloadUrl=_download_url(report_week_id)))

    except HTTPException:
        raise
    except ReportWeekNotFoundError:
        # Week deleted between the status check and the export
        raise HTTPException(status_code=404, detail="Report not found")
    except Exception as e:
        logger.error(f"Error generating PDF for {tenant_id}/{report_week_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="An unexpected error occurred")


@router.get("/{report_week_id}/pdf", response_class=FileResponse)
async def download_report_pdf(
    report_week_id: str,
    tenant_id: TenantIdDep
) -> FileResponse:
    """
    Stream the cached PDF for a report week.

    Raises:
        HTTPException: 404 if no cached PDF exists or its file is gone,
            500 on unexpected errors.
    """
    _require_valid_id(report_week_id)

    try:
        cached = await get_cached_export(tenant_id, report_week_id)
        if cached is None or not cached.pdf_url:
            raise HTTPException(status_code=404, detail="PDF not found. Generate it first via POST.")

        pdf_path = Path(cached.pdf_url)
        if not pdf_path.is_file():
            logger.warning(f"Cached PDF missing on disk: {pdf_path}")
            raise HTTPException(status_code=404, detail="PDF file not found")

        return FileResponse(
            pdf_path,
            media_type=PDF_MEDIA_TYPE,
            filename=f"report-{report_week_id}.pdf",
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error serving PDF for {tenant_id}/{report_week_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="An unexpected error occurred")
