"""
Pydantic models for the report export service.

Covers the records read from collaborator-owned tables (report weeks, manual
content, tenant branding, synced metric rows), the derived dashboard figures
that feed the document renderer, the report_exports cache record, and the
HTTP response envelopes.

Row models use snake_case field names that match the database columns, so an
asyncpg Record converts with Model(**dict(record)).

All models use Pydantic v2 syntax.
"""

from datetime import datetime, date as DateType
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from report_export.models.enums import ReportWeekStatus


# =============================================================================
# Collaborator Records (read-only to this service)
# =============================================================================


class ReportWeek(BaseModel):
    """
    A Monday-Friday reporting period for one tenant.

    The export pipeline only reads report weeks. Callers must refuse to
    export anything whose status is not published.
    """
    id: str = Field(..., description="Report week identifier")
    tenant_id: str = Field(..., description="Owning tenant identifier")
    week_ending_date: DateType = Field(..., description="Friday that ends the week")
    period_start_at: datetime = Field(..., description="Monday 00:00 in tenant timezone")
    period_end_at: datetime = Field(..., description="Friday 23:59:59 in tenant timezone")
    status: ReportWeekStatus = Field(
        default=ReportWeekStatus.DRAFT,
        description="Lifecycle status (draft or published)"
    )

    @property
    def is_published(self) -> bool:
        return self.status == ReportWeekStatus.PUBLISHED


class ManualContent(BaseModel):
    """
    Editor-authored rich content for a report week.

    Every field is independently nullable. The HTML is sanitized upstream and
    is inserted into the document verbatim.
    """
    narrative_rich: Optional[str] = None
    initiatives_rich: Optional[str] = None
    needs_rich: Optional[str] = None
    discovery_days_rich: Optional[str] = None


class TenantBranding(BaseModel):
    """Tenant display name and branding configuration used for co-branding."""
    tenant_name: Optional[str] = None
    tenant_logo_url: Optional[str] = None
    theme_id: Optional[str] = None
    accent_color_override: Optional[str] = Field(
        default=None,
        description="Optional #RRGGBB accent color replacing the theme accent"
    )
    timezone: Optional[str] = Field(
        default="America/New_York",
        description="IANA timezone used to display the report period"
    )


# =============================================================================
# Synced Metric Rows
# =============================================================================


class PipelineStageRow(BaseModel):
    """
    Count of candidates in one pipeline stage.

    report_week_id is None for the live snapshot and set for a historical
    snapshot frozen at a past report week.
    """
    tenant_id: str
    report_week_id: Optional[str] = None
    stage: str
    count: Optional[int] = 0
    # numeric column; asyncpg yields Decimal, fixtures may pass strings
    dollar_value: Optional[Union[Decimal, str, float]] = None


class LeadMetricRow(BaseModel):
    """Lead counts for one dimension value, live or frozen at a report week."""
    tenant_id: str
    report_week_id: Optional[str] = None
    dimension_type: str = "status"
    leads: Optional[int] = 0
    created_at: datetime


class HistoricalLeadRow(BaseModel):
    """A historical lead metric row joined to its report week's ending date."""
    week_ending_date: DateType
    leads: Optional[int] = 0


# =============================================================================
# Derived Dashboard Figures (not persisted)
# =============================================================================


class KPIData(BaseModel):
    """
    Headline KPI figures for a tenant.

    priority_candidates never exceeds total_pipeline because priority stages
    are a subset of all stages summed into the total.
    """
    new_leads: int = Field(default=0, ge=0)
    total_pipeline: int = Field(default=0, ge=0)
    priority_candidates: int = Field(default=0, ge=0)
    weighted_pipeline_value: str = Field(
        default="0.00",
        description="Decimal string with exactly two fractional digits"
    )


class PipelineByStagePoint(BaseModel):
    """One row of the pipeline-by-stage table."""
    stage: str
    count: int = 0


class LeadTrendPoint(BaseModel):
    """Total leads for one historical week, labelled by its ISO week-ending date."""
    week_label: str
    leads: int = 0


# =============================================================================
# Export Cache
# =============================================================================


class ExportCacheRecord(BaseModel):
    """
    Row of the report_exports table.

    Unique per (tenant_id, report_week_id). Created on the first successful
    render and updated (pdf_url and created_at) on conflict.
    """
    tenant_id: str
    report_week_id: str
    pdf_url: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# HTTP Responses
# =============================================================================


class ExportDownload(BaseModel):
    """Location the exported PDF can be downloaded from."""
    downloadUrl: str = Field(..., description="Relative URL serving the PDF")


class ExportResponse(BaseModel):
    """Response model for the export trigger endpoint."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"downloadUrl": "/reports/6f1c2a/pdf"}
            }
        }
    )

    success: bool = True
    data: ExportDownload
