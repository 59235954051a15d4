"""
Pytest test module for the dashboard aggregation service.

Covers the pure aggregations (KPI figures, pipeline-by-stage, lead trends,
window boundaries, lenient dollar parsing) and the asyncpg fetchers that feed
them.

Test Classes:
- TestWindowStart: report-week / rolling-7 boundaries and fallback
- TestParseDollarValue: malformed and non-finite values decode to zero
- TestComputeKPI: totals, priority subset, weighted value, new-lead window
- TestPipelineByStage: scope filtering and stored order
- TestLeadTrends: grouping, limiting and ascending order
- TestFetchers: query selection and record conversion
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from report_export.models import (
    HistoricalLeadRow,
    LeadMetricRow,
    PipelineStageRow,
    TimeWindow,
)
from report_export.services.dashboard import (
    compute_kpi,
    fetch_kpi_data,
    fetch_lead_trends,
    fetch_pipeline_by_stage,
    get_lead_trends,
    get_pipeline_by_stage,
    parse_dollar_value,
    window_start,
)
from report_export.sql.report_queries import (
    LEAD_TREND_ROWS_QUERY,
    LIVE_LEAD_ROWS_QUERY,
    SNAPSHOT_LEAD_ROWS_QUERY,
)

from report_export.tests.conftest import REPORT_WEEK_ID, TENANT_ID


# Thursday afternoon of the week starting Monday 2026-02-02
NOW = datetime(2026, 2, 5, 15, 30, tzinfo=timezone.utc)


# =============================================================================
# Window Boundaries
# =============================================================================

class TestWindowStart:

    def test_report_week_starts_monday_midnight(self):
        assert window_start(TimeWindow.REPORT_WEEK, NOW) == datetime(2026, 2, 2, tzinfo=timezone.utc)

    def test_report_week_on_monday_is_same_day(self):
        monday = datetime(2026, 2, 2, 0, 0, 1, tzinfo=timezone.utc)
        assert window_start('report-week', monday) == datetime(2026, 2, 2, tzinfo=timezone.utc)

    def test_report_week_on_sunday_goes_back_six_days(self):
        sunday = datetime(2026, 2, 8, 23, 0, tzinfo=timezone.utc)
        assert window_start('report-week', sunday) == datetime(2026, 2, 2, tzinfo=timezone.utc)

    def test_rolling_seven_days_at_midnight(self):
        assert window_start('rolling-7', NOW) == datetime(2026, 1, 29, tzinfo=timezone.utc)

    @pytest.mark.parametrize('raw', ['last-quarter', '', None, 'ROLLING-7'])
    def test_unknown_window_falls_back_to_week_start(self, raw):
        assert window_start(raw, NOW) == window_start(TimeWindow.REPORT_WEEK, NOW)

    def test_naive_now_is_read_as_utc(self):
        naive = datetime(2026, 2, 5, 15, 30)
        assert window_start('report-week', naive) == datetime(2026, 2, 2, tzinfo=timezone.utc)


# =============================================================================
# Dollar Parsing
# =============================================================================

class TestParseDollarValue:

    @pytest.mark.parametrize('value,expected', [
        ('1500.25', Decimal('1500.25')),
        (' 42 ', Decimal('42')),
        (Decimal('99.99'), Decimal('99.99')),
        (10, Decimal('10')),
        (2.5, Decimal('2.5')),
    ])
    def test_valid_values(self, value, expected):
        assert parse_dollar_value(value) == expected

    @pytest.mark.parametrize('value', [None, '', 'abc', '12,000', 'NaN', 'Infinity', '-inf', float('nan')])
    def test_malformed_or_non_finite_values_are_zero(self, value):
        assert parse_dollar_value(value) == Decimal('0')


# =============================================================================
# KPI Computation
# =============================================================================

class TestComputeKPI:

    def test_known_fixture_totals(self, sample_stage_rows, sample_lead_rows):
        """
        Fixture rows: New Lead 50, Outbound Call 30, QR Returned 10/$50000,
        FDD Sent 5/$90000, FA Sent 2/$40000 (plus $160000 on Outbound Call).
        """
        kpi = compute_kpi(sample_stage_rows, sample_lead_rows, now=NOW)

        assert kpi.total_pipeline == 97
        assert kpi.priority_candidates == 17
        assert kpi.weighted_pipeline_value == '340000.00'

    def test_priority_never_exceeds_total(self, sample_stage_rows):
        kpi = compute_kpi(sample_stage_rows, [], now=NOW)
        assert kpi.priority_candidates <= kpi.total_pipeline

    def test_new_leads_counts_only_current_week(self, sample_stage_rows, sample_lead_rows):
        kpi = compute_kpi(sample_stage_rows, sample_lead_rows, TimeWindow.REPORT_WEEK, now=NOW)
        # 7 + 5; the Jan 30 row is before Monday
        assert kpi.new_leads == 12

    def test_rolling_window_includes_last_seven_days(self, sample_stage_rows, sample_lead_rows):
        kpi = compute_kpi(sample_stage_rows, sample_lead_rows, 'rolling-7', now=NOW)
        # Window starts Jan 29 00:00 so the Jan 30 row counts
        assert kpi.new_leads == 23

    def test_unknown_window_matches_report_week(self, sample_stage_rows, sample_lead_rows):
        assert (
            compute_kpi(sample_stage_rows, sample_lead_rows, 'fortnight', now=NOW)
            == compute_kpi(sample_stage_rows, sample_lead_rows, 'report-week', now=NOW)
        )

    def test_empty_inputs_give_zeros(self):
        kpi = compute_kpi([], [], now=NOW)

        assert kpi.new_leads == 0
        assert kpi.total_pipeline == 0
        assert kpi.priority_candidates == 0
        assert kpi.weighted_pipeline_value == '0.00'

    def test_null_counts_and_malformed_dollars_count_as_zero(self):
        rows = [
            PipelineStageRow(tenant_id=TENANT_ID, stage='FDD Signed', count=None, dollar_value='oops'),
            PipelineStageRow(tenant_id=TENANT_ID, stage='FA Sent', count=3, dollar_value='1000.5'),
        ]
        kpi = compute_kpi(rows, [], now=NOW)

        assert kpi.total_pipeline == 3
        assert kpi.priority_candidates == 3
        assert kpi.weighted_pipeline_value == '1000.50'

    def test_stage_outside_full_pipeline_counts_in_total_but_not_value(self):
        rows = [
            PipelineStageRow(tenant_id=TENANT_ID, stage='Closed Lost', count=4, dollar_value='9999'),
            PipelineStageRow(tenant_id=TENANT_ID, stage='QR', count=1, dollar_value='100'),
        ]
        kpi = compute_kpi(rows, [], now=NOW)

        assert kpi.total_pipeline == 5
        assert kpi.priority_candidates == 0
        assert kpi.weighted_pipeline_value == '100.00'

    def test_weighted_value_rounds_half_up_to_cents(self):
        rows = [PipelineStageRow(tenant_id=TENANT_ID, stage='QR', count=1, dollar_value='0.005')]
        assert compute_kpi(rows, [], now=NOW).weighted_pipeline_value == '0.01'

    def test_live_scope_ignores_historical_rows(self, sample_stage_rows):
        frozen = PipelineStageRow(
            tenant_id=TENANT_ID, report_week_id=REPORT_WEEK_ID,
            stage='FA Sent', count=100, dollar_value='1'
        )
        kpi = compute_kpi(sample_stage_rows + [frozen], [], now=NOW)
        assert kpi.total_pipeline == 97

    def test_snapshot_scope_uses_frozen_rows_without_window(self):
        stage_rows = [
            PipelineStageRow(tenant_id=TENANT_ID, report_week_id=REPORT_WEEK_ID,
                             stage='FDD Sent', count=4, dollar_value='2000'),
            PipelineStageRow(tenant_id=TENANT_ID, report_week_id=None,
                             stage='FDD Sent', count=40, dollar_value='20000'),
        ]
        lead_rows = [
            # Created long before the current week; frozen rows are not windowed
            LeadMetricRow(tenant_id=TENANT_ID, report_week_id=REPORT_WEEK_ID, leads=9,
                          created_at=datetime(2025, 6, 1, tzinfo=timezone.utc)),
            LeadMetricRow(tenant_id=TENANT_ID, report_week_id=None, leads=50, created_at=NOW),
        ]

        kpi = compute_kpi(stage_rows, lead_rows, report_week_id=REPORT_WEEK_ID, now=NOW)

        assert kpi.total_pipeline == 4
        assert kpi.priority_candidates == 4
        assert kpi.weighted_pipeline_value == '2000.00'
        assert kpi.new_leads == 9


# =============================================================================
# Pipeline by Stage
# =============================================================================

class TestPipelineByStage:

    def test_preserves_stored_order(self):
        stages = ['FA Sent', 'New Lead', 'QR Returned']
        rows = [PipelineStageRow(tenant_id=TENANT_ID, stage=s, count=i) for i, s in enumerate(stages)]

        points = get_pipeline_by_stage(rows)

        assert [p.stage for p in points] == stages
        assert [p.count for p in points] == [0, 1, 2]

    def test_filters_to_requested_scope(self):
        rows = [
            PipelineStageRow(tenant_id=TENANT_ID, stage='QR', count=3),
            PipelineStageRow(tenant_id=TENANT_ID, report_week_id=REPORT_WEEK_ID, stage='QR', count=8),
        ]

        assert [p.count for p in get_pipeline_by_stage(rows)] == [3]
        assert [p.count for p in get_pipeline_by_stage(rows, report_week_id=REPORT_WEEK_ID)] == [8]

    def test_null_count_becomes_zero(self):
        rows = [PipelineStageRow(tenant_id=TENANT_ID, stage='QR', count=None)]
        assert get_pipeline_by_stage(rows)[0].count == 0


# =============================================================================
# Lead Trends
# =============================================================================

class TestLeadTrends:

    def test_returns_ascending_by_label(self, sample_historical_rows):
        trends = get_lead_trends(sample_historical_rows, limit=4)

        assert [(t.week_label, t.leads) for t in trends] == [
            ('2026-01-12', 10),
            ('2026-01-19', 18),
            ('2026-01-26', 22),
            ('2026-02-02', 15),
        ]

    def test_limit_keeps_most_recent_weeks(self, sample_historical_rows):
        trends = get_lead_trends(sample_historical_rows, limit=2)
        assert [t.week_label for t in trends] == ['2026-01-26', '2026-02-02']

    def test_rows_sharing_a_week_are_summed(self):
        rows = [
            HistoricalLeadRow(week_ending_date=date(2026, 2, 6), leads=4),
            HistoricalLeadRow(week_ending_date=date(2026, 1, 30), leads=3),
            HistoricalLeadRow(week_ending_date=date(2026, 2, 6), leads=1),
            HistoricalLeadRow(week_ending_date=date(2026, 2, 6), leads=None),
        ]
        trends = get_lead_trends(rows)

        assert [(t.week_label, t.leads) for t in trends] == [('2026-01-30', 3), ('2026-02-06', 5)]

    def test_already_ascending_input_stays_ascending(self, sample_historical_rows):
        ordered = sorted(sample_historical_rows, key=lambda r: r.week_ending_date)
        labels = [t.week_label for t in get_lead_trends(ordered)]
        assert labels == sorted(labels)

    def test_empty_and_zero_limit(self, sample_historical_rows):
        assert get_lead_trends([]) == []
        assert get_lead_trends(sample_historical_rows, limit=0) == []


# =============================================================================
# Database Fetchers
# =============================================================================

@pytest.mark.asyncio
class TestFetchers:

    async def test_fetch_kpi_data_live_uses_window_query(self, mock_db_pool, mock_conn):
        """Live KPIs read rows with no report week and bound leads by created_at."""
        # Arrange
        mock_conn.fetch.side_effect = [
            [{'tenant_id': TENANT_ID, 'report_week_id': None, 'stage': 'FDD Sent',
              'count': 5, 'dollar_value': Decimal('90000')}],
            [{'tenant_id': TENANT_ID, 'report_week_id': None, 'dimension_type': 'status',
              'leads': 6, 'created_at': NOW}],
        ]

        # Act
        with patch('report_export.services.dashboard.get_db_pool', new=AsyncMock(return_value=mock_db_pool)):
            kpi = await fetch_kpi_data(TENANT_ID, time_window='report-week', now=NOW)

        # Assert
        assert kpi.total_pipeline == 5
        assert kpi.priority_candidates == 5
        assert kpi.weighted_pipeline_value == '90000.00'
        assert kpi.new_leads == 6

        stage_call, lead_call = mock_conn.fetch.call_args_list
        assert 'report_week_id IS NULL' in stage_call.args[0]
        assert stage_call.args[1:] == (TENANT_ID,)
        assert lead_call.args == (LIVE_LEAD_ROWS_QUERY, TENANT_ID, datetime(2026, 2, 2, tzinfo=timezone.utc))

    async def test_fetch_kpi_data_snapshot_uses_report_week(self, mock_db_pool, mock_conn):
        # Arrange
        mock_conn.fetch.side_effect = [
            [{'tenant_id': TENANT_ID, 'report_week_id': REPORT_WEEK_ID, 'stage': 'New Lead',
              'count': 12, 'dollar_value': None}],
            [{'tenant_id': TENANT_ID, 'report_week_id': REPORT_WEEK_ID, 'dimension_type': 'status',
              'leads': 3, 'created_at': datetime(2025, 1, 1, tzinfo=timezone.utc)}],
        ]

        # Act
        with patch('report_export.services.dashboard.get_db_pool', new=AsyncMock(return_value=mock_db_pool)):
            kpi = await fetch_kpi_data(TENANT_ID, report_week_id=REPORT_WEEK_ID, now=NOW)

        # Assert
        assert kpi.total_pipeline == 12
        assert kpi.new_leads == 3

        stage_call, lead_call = mock_conn.fetch.call_args_list
        assert 'report_week_id = $2' in stage_call.args[0]
        assert stage_call.args[1:] == (TENANT_ID, REPORT_WEEK_ID)
        assert lead_call.args == (SNAPSHOT_LEAD_ROWS_QUERY, TENANT_ID, REPORT_WEEK_ID)

    async def test_fetch_pipeline_by_stage_converts_records(self, mock_db_pool, mock_conn):
        # Arrange
        mock_conn.fetch.return_value = [
            {'tenant_id': TENANT_ID, 'report_week_id': REPORT_WEEK_ID, 'stage': 'QR', 'count': 2,
             'dollar_value': None},
            {'tenant_id': TENANT_ID, 'report_week_id': REPORT_WEEK_ID, 'stage': 'FA Sent', 'count': 1,
             'dollar_value': None},
        ]

        # Act
        with patch('report_export.services.dashboard.get_db_pool', new=AsyncMock(return_value=mock_db_pool)):
            points = await fetch_pipeline_by_stage(TENANT_ID, report_week_id=REPORT_WEEK_ID)

        # Assert
        assert [(p.stage, p.count) for p in points] == [('QR', 2), ('FA Sent', 1)]

    async def test_fetch_lead_trends_resorts_descending_rows(self, mock_db_pool, mock_conn):
        """The query returns newest weeks first; the result is oldest first."""
        # Arrange
        mock_conn.fetch.return_value = [
            {'week_ending_date': date(2026, 2, 6), 'leads': 8},
            {'week_ending_date': date(2026, 1, 30), 'leads': 6},
            {'week_ending_date': date(2026, 1, 23), 'leads': 4},
        ]

        # Act
        with patch('report_export.services.dashboard.get_db_pool', new=AsyncMock(return_value=mock_db_pool)):
            trends = await fetch_lead_trends(TENANT_ID, weeks=4)

        # Assert
        assert [t.week_label for t in trends] == ['2026-01-23', '2026-01-30', '2026-02-06']
        mock_conn.fetch.assert_awaited_once_with(LEAD_TREND_ROWS_QUERY, TENANT_ID, 4)
