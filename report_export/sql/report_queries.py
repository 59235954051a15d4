"""
Report Data Queries Module.

Provides parameterized asyncpg queries for the data the export pipeline reads:
- Report weeks and their manual content
- Tenant display name and branding configuration
- Pipeline stage counts (live or frozen at a report week)
- Lead metrics (live rolling window, report-week snapshot, weekly history)

Identifiers are uuid columns; they are selected as text so row models can use
plain string ids, and parameters are passed as strings.

Live rows have report_week_id IS NULL. Historical snapshot rows carry the
report week they were frozen at.
"""

from typing import Optional

from report_export.models.enums import LeadDimension


# =============================================================================
# CONSTANTS
# =============================================================================

# Lead metric rows are stored once per dimension; totals use this one
LEAD_COUNT_DIMENSION: str = LeadDimension.STATUS.value


# =============================================================================
# REPORT WEEK QUERIES
# =============================================================================

REPORT_WEEK_BY_ID_QUERY = """
    SELECT
        id::text AS id,
        tenant_id::text AS tenant_id,
        week_ending_date,
        period_start_at,
        period_end_at,
        status
    FROM report_weeks
    WHERE id = $1
      AND tenant_id = $2
    LIMIT 1
"""

REPORT_WEEK_MANUAL_QUERY = """
    SELECT
        narrative_rich,
        initiatives_rich,
        needs_rich,
        discovery_days_rich
    FROM report_week_manual
    WHERE report_week_id = $1
    LIMIT 1
"""

# Tenant row always exists for a valid tenant; branding is optional
TENANT_BRANDING_QUERY = """
    SELECT
        t.name AS tenant_name,
        t.timezone AS timezone,
        tb.tenant_logo_url,
        tb.theme_id,
        tb.accent_color_override
    FROM tenants t
    LEFT JOIN tenant_branding tb ON tb.tenant_id = t.id
    WHERE t.id = $1
    LIMIT 1
"""


# =============================================================================
# PIPELINE STAGE QUERIES
# =============================================================================

def get_pipeline_stage_rows_query(report_week_id: Optional[str] = None) -> str:
    """
    Generate SQL to fetch pipeline stage rows for a tenant.

    Args:
        report_week_id: When given, the query expects it as $2 and returns the
            snapshot frozen at that week. When None, returns the live rows.

    Returns:
        Parameterized query; $1 is always the tenant id.

    Note:
        Rows are returned in insertion order (created_at, id) so the
        pipeline table keeps the order the sync job wrote the stages in.
    """
    snapshot_filter = (
        "AND report_week_id = $2"
        if report_week_id is not None
        else "AND report_week_id IS NULL"
    )
    return f"""
    SELECT
        tenant_id::text AS tenant_id,
        report_week_id::text AS report_week_id,
        stage,
        count,
        dollar_value
    FROM pipeline_stage_counts
    WHERE tenant_id = $1
      {snapshot_filter}
    ORDER BY created_at ASC, id ASC
    """


# =============================================================================
# LEAD METRIC QUERIES
# =============================================================================

# $1 tenant id, $2 window start (timestamp)
LIVE_LEAD_ROWS_QUERY = f"""
    SELECT
        tenant_id::text AS tenant_id,
        report_week_id::text AS report_week_id,
        dimension_type,
        leads,
        created_at
    FROM lead_metrics
    WHERE tenant_id = $1
      AND report_week_id IS NULL
      AND dimension_type = '{LEAD_COUNT_DIMENSION}'
      AND created_at >= $2
"""

# $1 tenant id, $2 report week id
SNAPSHOT_LEAD_ROWS_QUERY = f"""
    SELECT
        tenant_id::text AS tenant_id,
        report_week_id::text AS report_week_id,
        dimension_type,
        leads,
        created_at
    FROM lead_metrics
    WHERE tenant_id = $1
      AND report_week_id = $2
      AND dimension_type = '{LEAD_COUNT_DIMENSION}'
"""

# $1 tenant id, $2 number of weeks; newest weeks first, re-sorted by the caller
LEAD_TREND_ROWS_QUERY = f"""
    SELECT
        rw.week_ending_date,
        COALESCE(SUM(lm.leads), 0)::int AS leads
    FROM lead_metrics lm
    JOIN report_weeks rw ON lm.report_week_id = rw.id
    WHERE lm.tenant_id = $1
      AND lm.report_week_id IS NOT NULL
      AND lm.dimension_type = '{LEAD_COUNT_DIMENSION}'
    GROUP BY rw.week_ending_date
    ORDER BY rw.week_ending_date DESC
    LIMIT $2
"""
