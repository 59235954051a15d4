"""
Report Export Services Module

Business logic for the report snapshot export pipeline. Pure computations are
kept apart from the asyncpg fetchers that feed them, so each can be tested on
its own.

Services:
- stages: Priority and full-pipeline stage membership
- branding: Theme palettes and accent override colour tokens
- dashboard: KPI, pipeline-by-stage and lead trend aggregation
- report_weeks: Report week, manual content and tenant branding lookups
- document: Self-contained HTML report document
- renderer_pool: Lazily launched headless Chromium shared by all renders
- export: Cached, single-flight PDF export orchestration

All services are consumed by the API layer (report_export/api/) and the
maintenance jobs (report_export/jobs/).
"""

# =============================================================================
# Stage Classifier Exports
# =============================================================================

from report_export.services.stages import (
    PRIORITY_STAGES,
    FULL_PIPELINE_STAGES,
    is_priority_stage,
    is_full_pipeline_stage,
)

# =============================================================================
# Branding Resolver Exports
# =============================================================================

from report_export.services.branding import (
    THEMES,
    ThemeConfig,
    BrandingTokens,
    get_theme,
    darken,
    contrast_text,
    is_hex_color,
    resolve_branding,
)

# =============================================================================
# Dashboard Aggregation Exports
# Pure aggregations over synced metric rows plus their database fetchers
# =============================================================================

from report_export.services.dashboard import (
    compute_kpi,
    get_pipeline_by_stage,
    get_lead_trends,
    window_start,
    parse_dollar_value,
    fetch_kpi_data,
    fetch_pipeline_by_stage,
    fetch_lead_trends,
)

# =============================================================================
# Report Week Data Access Exports
# =============================================================================

from report_export.services.report_weeks import (
    fetch_report_week,
    fetch_manual_content,
    fetch_tenant_branding,
)

# =============================================================================
# Document Renderer Exports
# =============================================================================

from report_export.services.document import (
    render_report_document,
    format_currency,
    format_period,
)

# =============================================================================
# Rendering Pool and Export Orchestrator Exports
# =============================================================================

from report_export.services.renderer_pool import RendererPool

from report_export.services.export import (
    ReportExporter,
    ReportWeekNotFoundError,
    get_cached_export,
    upsert_export_record,
    list_export_records,
)


__all__ = [
    # Stages
    "PRIORITY_STAGES",
    "FULL_PIPELINE_STAGES",
    "is_priority_stage",
    "is_full_pipeline_stage",
    # Branding
    "THEMES",
    "ThemeConfig",
    "BrandingTokens",
    "get_theme",
    "darken",
    "contrast_text",
    "is_hex_color",
    "resolve_branding",
    # Dashboard
    "compute_kpi",
    "get_pipeline_by_stage",
    "get_lead_trends",
    "window_start",
    "parse_dollar_value",
    "fetch_kpi_data",
    "fetch_pipeline_by_stage",
    "fetch_lead_trends",
    # Report weeks
    "fetch_report_week",
    "fetch_manual_content",
    "fetch_tenant_branding",
    # Document
    "render_report_document",
    "format_currency",
    "format_period",
    # Rendering and export
    "RendererPool",
    "ReportExporter",
    "ReportWeekNotFoundError",
    "get_cached_export",
    "upsert_export_record",
    "list_export_records",
]
