"""
Report week, manual content and tenant branding lookups.

These records are owned by other parts of the portal (the reporting workflow
and tenant administration). This module only reads them, converting asyncpg
records into the Pydantic models the export pipeline consumes.
"""

from typing import Optional

from report_export.core.database import execute_query_one
from report_export.models.schemas import ManualContent, ReportWeek, TenantBranding
from report_export.sql.report_queries import (
    REPORT_WEEK_BY_ID_QUERY,
    REPORT_WEEK_MANUAL_QUERY,
    TENANT_BRANDING_QUERY,
)


async def fetch_report_week(report_week_id: str, tenant_id: str) -> Optional[ReportWeek]:
    """
    Get a report week belonging to a tenant.

    Args:
        report_week_id: Report week identifier.
        tenant_id: Tenant the week must belong to.

    Returns:
        ReportWeek, or None when no week with that id exists for the tenant.
        A week owned by another tenant is reported as missing.
    """
    row = await execute_query_one(REPORT_WEEK_BY_ID_QUERY, report_week_id, tenant_id)

    if row is None:
        return None
    return ReportWeek(**dict(row))


async def fetch_manual_content(report_week_id: str) -> ManualContent:
    """Get editor-authored content for a report week; empty when none exists."""
    row = await execute_query_one(REPORT_WEEK_MANUAL_QUERY, report_week_id)

    if row is None:
        return ManualContent()
    return ManualContent(**dict(row))


async def fetch_tenant_branding(tenant_id: str) -> TenantBranding:
    """
    Get the tenant's display name and branding configuration.

    Returns an empty TenantBranding when the tenant row is missing; callers
    apply the display-name, theme and timezone fallbacks.
    """
    row = await execute_query_one(TENANT_BRANDING_QUERY, tenant_id)

    if row is None:
        return TenantBranding()
    return TenantBranding(**dict(row))
