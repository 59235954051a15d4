"""
SQL Query Module for the report export service.

Provides parameterized asyncpg queries for:
- Report weeks, manual content, tenant branding and synced metric rows
  (report_queries)
- The report_exports cache table (export_queries)

Keeps SQL text apart from the services that run it.

Example usage:
    from report_export.sql import (
        REPORT_WEEK_BY_ID_QUERY,
        get_pipeline_stage_rows_query,
    )

    query = get_pipeline_stage_rows_query(report_week_id)
    rows = await conn.fetch(query, tenant_id, report_week_id)
"""

from report_export.sql.report_queries import (
    LEAD_COUNT_DIMENSION,
    REPORT_WEEK_BY_ID_QUERY,
    REPORT_WEEK_MANUAL_QUERY,
    TENANT_BRANDING_QUERY,
    LIVE_LEAD_ROWS_QUERY,
    SNAPSHOT_LEAD_ROWS_QUERY,
    LEAD_TREND_ROWS_QUERY,
    get_pipeline_stage_rows_query,
)

from report_export.sql.export_queries import (
    EXPORT_CACHE_LOOKUP_QUERY,
    EXPORT_CACHE_UPSERT_QUERY,
    EXPORT_REFERENCED_PATHS_QUERY,
    get_export_records_query,
)

__all__ = [
    # Report data
    'LEAD_COUNT_DIMENSION',
    'REPORT_WEEK_BY_ID_QUERY',
    'REPORT_WEEK_MANUAL_QUERY',
    'TENANT_BRANDING_QUERY',
    'LIVE_LEAD_ROWS_QUERY',
    'SNAPSHOT_LEAD_ROWS_QUERY',
    'LEAD_TREND_ROWS_QUERY',
    'get_pipeline_stage_rows_query',
    # Export cache
    'EXPORT_CACHE_LOOKUP_QUERY',
    'EXPORT_CACHE_UPSERT_QUERY',
    'EXPORT_REFERENCED_PATHS_QUERY',
    'get_export_records_query',
]
