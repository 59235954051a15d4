"""
FastAPI dependency injection module for the report export service.

Provides reusable dependencies for configuration access, the calling tenant
and the shared ReportExporter, so endpoint handlers stay free of
infrastructure wiring and tests can override any of them.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached Settings singleton
- get_tenant_id / TenantIdDep: the calling tenant from the X-Tenant-Id header
- get_exporter / ExporterDep: the ReportExporter created at startup

Tenant Resolution:
Session validation and RBAC are handled by the portal in front of this
service. By the time a request arrives here the tenant has been resolved and
is forwarded in the X-Tenant-Id header. A request without it is rejected with
403, mirroring the portal's "no tenant context" response.

Usage Examples:
    @router.post("/reports/{report_week_id}/pdf")
    async def export_pdf(
        report_week_id: str,
        tenant_id: TenantIdDep,
        exporter: ExporterDep
    ):
        path = await exporter.export_report(tenant_id, report_week_id)

    # In tests
    app.dependency_overrides[get_exporter] = lambda: mock_exporter
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from report_export.core.config import Settings, get_settings
from report_export.services.export import ReportExporter


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can use
    app.dependency_overrides[get_settings_dependency].
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Tenant Dependency
# =============================================================================

async def get_tenant_id(
    x_tenant_id: Annotated[Optional[str], Header()] = None
) -> str:
    """
    Resolve the calling tenant from the X-Tenant-Id header.

    Raises:
        HTTPException: 403 when no tenant context is present, or when the
            header is not a tenant id (tenant ids are UUIDs).
    """
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(status_code=403, detail="No tenant context")

    tenant_id = x_tenant_id.strip()
    try:
        uuid.UUID(tenant_id)
    except ValueError:
        raise HTTPException(status_code=403, detail="No tenant context")
    return tenant_id


TenantIdDep = Annotated[str, Depends(get_tenant_id)]


# =============================================================================
# Exporter Dependency
# =============================================================================

def get_exporter(request: Request) -> ReportExporter:
    """
    Return the ReportExporter created by the application lifespan.

    Raises:
        HTTPException: 503 if the exporter has not been initialized.
    """
    exporter = getattr(request.app.state, 'exporter', None)
    if exporter is None:
        raise HTTPException(status_code=503, detail="Export service not initialized")
    return exporter


ExporterDep = Annotated[ReportExporter, Depends(get_exporter)]
