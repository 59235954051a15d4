"""
Dashboard aggregation service for the report export pipeline.

Turns synced pipeline stage rows and lead metric rows into the figures shown
on a report: headline KPIs, the pipeline-by-stage table and lead trends.

Key Functions:
- compute_kpi: New leads, total pipeline, priority candidates, weighted value
- get_pipeline_by_stage: One table row per stage, in stored order
- get_lead_trends: Total leads per historical week, oldest first
- window_start: Lower bound of the new-leads window
- parse_dollar_value: Lenient numeric decoding of dollar columns

Async Fetchers:
- fetch_kpi_data / fetch_pipeline_by_stage / fetch_lead_trends read rows
  through the asyncpg pool and delegate to the pure functions above.

Scope:
- report_week_id=None selects the live snapshot (rows with no report week).
  New leads are then limited to the requested time window.
- A report week id selects the snapshot frozen at that week. Frozen rows are
  already bounded, so no time window applies.

Time Windows (UTC):
- report-week: Monday 00:00 of the current week (default)
- rolling-7: 00:00 seven days ago

Dollar values are summed as Decimal. Null, malformed and non-finite values
count as zero, so a bad row never fails a report.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Union

from report_export.core.config import get_settings
from report_export.core.database import get_db_pool
from report_export.models.enums import TimeWindow
from report_export.models.schemas import (
    HistoricalLeadRow,
    KPIData,
    LeadMetricRow,
    LeadTrendPoint,
    PipelineByStagePoint,
    PipelineStageRow,
)
from report_export.services.stages import is_full_pipeline_stage, is_priority_stage
from report_export.sql.report_queries import (
    LEAD_TREND_ROWS_QUERY,
    LIVE_LEAD_ROWS_QUERY,
    SNAPSHOT_LEAD_ROWS_QUERY,
    get_pipeline_stage_rows_query,
)


logger = logging.getLogger(__name__)


_CENTS = Decimal('0.01')
_ZERO = Decimal('0')


# =============================================================================
# Helpers
# =============================================================================


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def window_start(
    time_window: Union[str, TimeWindow, None] = TimeWindow.REPORT_WEEK,
    now: Optional[datetime] = None
) -> datetime:
    """
    Compute the start of the new-leads window.

    Args:
        time_window: 'report-week' or 'rolling-7'. Anything else decodes to
            'report-week'.
        now: Reference instant; defaults to the current UTC time.

    Returns:
        Timezone-aware UTC datetime at 00:00 of the window's first day.

    Example:
        >>> window_start('report-week', datetime(2026, 2, 5, 15, 30, tzinfo=timezone.utc))
        datetime.datetime(2026, 2, 2, 0, 0, tzinfo=datetime.timezone.utc)
    """
    window = TimeWindow(time_window)
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    if window == TimeWindow.ROLLING_7:
        start = current - timedelta(days=7)
    else:
        # weekday() is 0 on Monday
        start = current - timedelta(days=current.weekday())

    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_dollar_value(value: Any) -> Decimal:
    """
    Decode a dollar column to Decimal.

    None, malformed strings and non-finite values (NaN, Infinity) decode to 0.

    Example:
        >>> parse_dollar_value('1500.25')
        Decimal('1500.25')
        >>> parse_dollar_value('not-a-number')
        Decimal('0')
    """
    if value is None:
        return _ZERO

    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return _ZERO

    if not parsed.is_finite():
        return _ZERO
    return parsed


def _in_scope(row_report_week_id: Optional[str], report_week_id: Optional[str]) -> bool:
    if report_week_id is None:
        return row_report_week_id is None
    return row_report_week_id == report_week_id


# =============================================================================
# Pure Aggregations
# =============================================================================


def compute_kpi(
    stage_rows: Iterable[PipelineStageRow],
    new_leads_rows: Iterable[LeadMetricRow],
    time_window: Union[str, TimeWindow, None] = TimeWindow.REPORT_WEEK,
    *,
    report_week_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> KPIData:
    """
    Compute headline KPI figures.

    Formulas (over rows in scope):
    - total_pipeline = sum of count over all stage rows
    - priority_candidates = sum of count over priority stages
    - weighted_pipeline_value = sum of dollar_value over full-pipeline stages,
      two decimal places
    - new_leads = sum of leads; in live scope only rows created at or after
      window_start(time_window, now)

    Args:
        stage_rows: Pipeline stage rows.
        new_leads_rows: Lead metric rows.
        time_window: Window for new leads in live scope.
        report_week_id: None for the live snapshot, else the frozen week.
        now: Reference instant for the time window.

    Returns:
        KPIData. Empty inputs give all zeros and "0.00".
    """
    total_pipeline = 0
    priority_candidates = 0
    weighted_value = _ZERO

    for row in stage_rows:
        if not _in_scope(row.report_week_id, report_week_id):
            continue
        count = row.count or 0
        total_pipeline += count
        if is_priority_stage(row.stage):
            priority_candidates += count
        if is_full_pipeline_stage(row.stage):
            weighted_value += parse_dollar_value(row.dollar_value)

    live_cutoff = window_start(time_window, now) if report_week_id is None else None

    new_leads = 0
    for lead_row in new_leads_rows:
        if not _in_scope(lead_row.report_week_id, report_week_id):
            continue
        if live_cutoff is not None and _as_utc(lead_row.created_at) < live_cutoff:
            continue
        new_leads += lead_row.leads or 0

    weighted = weighted_value.quantize(_CENTS, rounding=ROUND_HALF_UP)

    return KPIData(
        new_leads=new_leads,
        total_pipeline=total_pipeline,
        priority_candidates=priority_candidates,
        weighted_pipeline_value=f"{weighted:f}",
    )


def get_pipeline_by_stage(
    rows: Iterable[PipelineStageRow],
    *,
    report_week_id: Optional[str] = None
) -> List[PipelineByStagePoint]:
    """Project scoped stage rows to (stage, count) pairs, preserving order."""
    return [
        PipelineByStagePoint(stage=row.stage, count=row.count or 0)
        for row in rows
        if _in_scope(row.report_week_id, report_week_id)
    ]


def get_lead_trends(
    rows: Iterable[HistoricalLeadRow],
    limit: int = 4
) -> List[LeadTrendPoint]:
    """
    Sum historical leads per week.

    Rows are grouped by the ISO week-ending date label. The `limit` most
    recent labels are kept and returned in ascending label order.

    Args:
        rows: Historical lead rows joined to their report week.
        limit: Maximum number of weeks to return.

    Returns:
        List of LeadTrendPoint, oldest week first.

    Example:
        >>> rows = [HistoricalLeadRow(week_ending_date=date(2026, 2, 6), leads=4),
        ...         HistoricalLeadRow(week_ending_date=date(2026, 1, 30), leads=3),
        ...         HistoricalLeadRow(week_ending_date=date(2026, 2, 6), leads=1)]
        >>> [(p.week_label, p.leads) for p in get_lead_trends(rows)]
        [('2026-01-30', 3), ('2026-02-06', 5)]
    """
    if limit <= 0:
        return []

    totals: Dict[str, int] = {}
    for row in rows:
        label = row.week_ending_date.isoformat()
        totals[label] = totals.get(label, 0) + (row.leads or 0)

    recent = sorted(totals, reverse=True)[:limit]
    return [LeadTrendPoint(week_label=label, leads=totals[label]) for label in sorted(recent)]


# =============================================================================
# Database Fetchers
# =============================================================================


async def fetch_kpi_data(
    tenant_id: str,
    report_week_id: Optional[str] = None,
    time_window: Union[str, TimeWindow, None] = TimeWindow.REPORT_WEEK,
    now: Optional[datetime] = None
) -> KPIData:
    """
    Load stage and lead rows for a tenant and compute its KPIs.

    Args:
        tenant_id: Tenant whose rows are read.
        report_week_id: None for live figures, else the frozen week snapshot.
        time_window: New-leads window for live figures.
        now: Reference instant for the time window.

    Returns:
        KPIData for the requested scope.

    Raises:
        asyncpg.PostgresError: If a query fails.
    """
    pool = await get_db_pool()
    stage_query = get_pipeline_stage_rows_query(report_week_id)

    async with pool.acquire() as conn:
        if report_week_id is None:
            stage_records = await conn.fetch(stage_query, tenant_id)
            lead_records = await conn.fetch(
                LIVE_LEAD_ROWS_QUERY, tenant_id, window_start(time_window, now)
            )
        else:
            stage_records = await conn.fetch(stage_query, tenant_id, report_week_id)
            lead_records = await conn.fetch(
                SNAPSHOT_LEAD_ROWS_QUERY, tenant_id, report_week_id
            )

    stage_rows = [PipelineStageRow(**dict(record)) for record in stage_records]
    lead_rows = [LeadMetricRow(**dict(record)) for record in lead_records]

    return compute_kpi(
        stage_rows,
        lead_rows,
        time_window,
        report_week_id=report_week_id,
        now=now,
    )


async def fetch_pipeline_by_stage(
    tenant_id: str,
    report_week_id: Optional[str] = None
) -> List[PipelineByStagePoint]:
    """Load the pipeline-by-stage table for a tenant, live or frozen."""
    pool = await get_db_pool()
    query = get_pipeline_stage_rows_query(report_week_id)
    args = (tenant_id,) if report_week_id is None else (tenant_id, report_week_id)

    async with pool.acquire() as conn:
        records = await conn.fetch(query, *args)

    rows = [PipelineStageRow(**dict(record)) for record in records]
    return get_pipeline_by_stage(rows, report_week_id=report_week_id)


async def fetch_lead_trends(
    tenant_id: str,
    weeks: Optional[int] = None
) -> List[LeadTrendPoint]:
    """
    Load total leads for the tenant's most recent historical weeks.

    Args:
        tenant_id: Tenant whose history is read.
        weeks: Number of weeks; defaults to settings.lead_trend_weeks.

    Returns:
        List of LeadTrendPoint, oldest week first.
    """
    limit = weeks if weeks is not None else get_settings().lead_trend_weeks
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        records = await conn.fetch(LEAD_TREND_ROWS_QUERY, tenant_id, limit)

    rows = [HistoricalLeadRow(**dict(record)) for record in records]
    trends = get_lead_trends(rows, limit=limit)

    logger.debug(f"Loaded {len(trends)} lead trend weeks for tenant {tenant_id}")
    return trends
