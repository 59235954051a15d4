"""
Package initialization file for report export models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so
other modules can import data models from report_export.models directly.

Usage:
    from report_export.models import (
        ReportWeek,
        ManualContent,
        KPIData,
        ThemeId,
        TimeWindow,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from report_export.models.enums import (
    ReportWeekStatus,
    ThemeId,
    TimeWindow,
    LeadDimension,
)

# =============================================================================
# Schemas
# =============================================================================

from report_export.models.schemas import (
    # Collaborator records
    ReportWeek,
    ManualContent,
    TenantBranding,
    # Synced metric rows
    PipelineStageRow,
    LeadMetricRow,
    HistoricalLeadRow,
    # Derived dashboard figures
    KPIData,
    PipelineByStagePoint,
    LeadTrendPoint,
    # Export cache
    ExportCacheRecord,
    # HTTP responses
    ExportDownload,
    ExportResponse,
)


__all__ = [
    # Enums
    "ReportWeekStatus",
    "ThemeId",
    "TimeWindow",
    "LeadDimension",
    # Schemas
    "ReportWeek",
    "ManualContent",
    "TenantBranding",
    "PipelineStageRow",
    "LeadMetricRow",
    "HistoricalLeadRow",
    "KPIData",
    "PipelineByStagePoint",
    "LeadTrendPoint",
    "ExportCacheRecord",
    "ExportDownload",
    "ExportResponse",
]
