"""
Report document renderer.

Builds the complete, self-contained HTML document that the headless renderer
turns into a PDF. The document carries:
- A header with tenant co-branding (logo, or the tenant name as text)
- Editor-authored content sections (only those with content)
- The KPI summary as a fixed 4-card grid
- Pipeline by stage as a table with proportional bars
- Lead trends as a two-column table
- A platform footer

Rules:
- Pure: the same inputs give byte-identical output. Pass generated_at to pin
  the footer year.
- One inline <style> block, no scripts and no external stylesheets, so the
  renderer never waits on anything but embedded images.
- Tenant name, logo URL, stage names and week labels are escaped for
  & < > " '. Rich content fields are sanitized upstream and inserted verbatim.
- Pipeline and lead trend sections are always emitted. Empty data renders an
  empty-state row.
"""

import html
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from report_export.models.schemas import (
    KPIData,
    LeadTrendPoint,
    ManualContent,
    PipelineByStagePoint,
    ReportWeek,
)
from report_export.services.branding import BrandingTokens
from report_export.services.dashboard import parse_dollar_value


DEFAULT_PORTAL_NAME = 'Mellon Portal'
DEFAULT_PLATFORM_NAME = 'Mellon Franchising'

# Smallest bar width (percent) so zero-count stages stay visible
MIN_BAR_WIDTH_PERCENT = 2.0

# (field, data-section key, title, description), in document order
CONTENT_SECTIONS: Tuple[Tuple[str, str, str, str], ...] = (
    ('narrative_rich', 'narrative', 'Narrative',
     'Weekly performance summary and key highlights'),
    ('initiatives_rich', 'initiatives', 'Initiatives',
     'Current marketing initiatives and activities'),
    ('needs_rich', 'needs', 'Needs From Client',
     'Action items or requests for the client'),
    ('discovery_days_rich', 'discovery-days', 'Discovery Days',
     'Discovery day activities and outcomes'),
)

# Locale-independent month abbreviations
_MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
           'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


# =============================================================================
# Formatting Helpers
# =============================================================================


def _esc(value: Any) -> str:
    """HTML-escape a value, quotes included; None becomes an empty string."""
    if value is None:
        return ''
    return html.escape(str(value), quote=True)


def format_currency(value: Any) -> str:
    """
    Format a dollar amount as whole dollars with thousands separators.

    Rounds half up. Malformed values render as $0.

    Example:
        >>> format_currency('340000.00')
        '$340,000'
        >>> format_currency('1234.50')
        '$1,235'
    """
    amount = parse_dollar_value(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    if amount < 0:
        return f"-${-amount:,.0f}"
    return f"${amount:,.0f}"


def _resolve_zone(tz_name: Optional[str]):
    if not tz_name:
        return dt_timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return dt_timezone.utc


def format_period(start: datetime, end: datetime, tz_name: Optional[str] = None) -> str:
    """
    Format a report period such as 'Feb 2 - Feb 6, 2026'.

    Dates are shown in the tenant's timezone; unknown zones use UTC and naive
    datetimes are read as UTC.
    """
    zone = _resolve_zone(tz_name)
    local_start = _to_zone(start, zone)
    local_end = _to_zone(end, zone)
    return (
        f"{_MONTHS[local_start.month - 1]} {local_start.day} - "
        f"{_MONTHS[local_end.month - 1]} {local_end.day}, {local_end.year}"
    )


def _to_zone(value: datetime, zone) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value.astimezone(zone)


def bar_width_percent(count: int, max_count: int) -> float:
    """Width of a pipeline bar: max(count / max_count * 100, 2)."""
    return max(count / max(max_count, 1) * 100, MIN_BAR_WIDTH_PERCENT)


# =============================================================================
# Stylesheet
# =============================================================================


def _render_stylesheet(tokens: BrandingTokens) -> str:
    """Inline stylesheet with the theme tokens resolved in place."""
    root_vars = '\n'.join(
        f"      {name}: {value};" for name, value in tokens.to_css_variables().items()
    )
    accent = tokens.accent_color

    return f"""
    :root {{
{root_vars}
    }}

    * {{ margin: 0; padding: 0; box-sizing: border-box; }}

    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      color: {tokens.foreground};
      background: {tokens.background};
      line-height: 1.6;
      max-width: 210mm;
      margin: 0 auto;
      padding: 20mm 15mm;
    }}

    /* Header */
    .report-header {{
      border-bottom: 3px solid {accent};
      padding-bottom: 16px;
      margin-bottom: 24px;
    }}
    .header-top {{
      display: flex;
      align-items: center;
      justify-content: space-between;
      margin-bottom: 12px;
    }}
    .tenant-logo {{ max-height: 48px; max-width: 200px; object-fit: contain; }}
    .portal-badge {{ font-size: 11px; color: {tokens.foreground_muted}; }}
    .report-title {{ font-size: 24px; font-weight: 700; color: {tokens.foreground}; margin-bottom: 4px; }}
    .report-period {{ font-size: 16px; color: {tokens.foreground_muted}; margin-bottom: 2px; }}
    .tenant-name {{ font-size: 14px; color: {accent}; font-weight: 600; }}

    /* Content sections */
    .content-section {{
      background: {tokens.card_background};
      border: 1px solid {tokens.card_border};
      border-radius: 8px;
      padding: 20px;
      margin-bottom: 16px;
      page-break-inside: avoid;
    }}
    .section-header {{
      margin-bottom: 12px;
      border-bottom: 1px solid {tokens.border_muted};
      padding-bottom: 8px;
    }}
    .section-title {{ font-size: 18px; font-weight: 600; color: {tokens.foreground}; margin-bottom: 4px; }}
    .section-description {{ font-size: 13px; color: {tokens.foreground_muted}; }}

    /* Rich text */
    .prose {{ font-size: 14px; line-height: 1.7; color: {tokens.foreground}; }}
    .prose h1 {{ font-size: 1.5rem; font-weight: 700; margin: 1rem 0 0.5rem; }}
    .prose h2 {{ font-size: 1.25rem; font-weight: 600; margin: 1rem 0 0.5rem; }}
    .prose h3 {{ font-size: 1.125rem; font-weight: 600; margin: 0.75rem 0 0.25rem; }}
    .prose p {{ margin: 0.5rem 0; }}
    .prose ul {{ list-style-type: disc; padding-left: 1.5rem; margin: 0.5rem 0; }}
    .prose ol {{ list-style-type: decimal; padding-left: 1.5rem; margin: 0.5rem 0; }}
    .prose li {{ margin: 0.25rem 0; }}
    .prose a {{ color: {accent}; text-decoration: underline; }}
    .prose strong {{ font-weight: 600; }}
    .prose em {{ font-style: italic; }}

    /* Dashboard */
    .dashboard-section, .pipeline-section, .trends-section {{
      margin-bottom: 16px;
      page-break-inside: avoid;
    }}
    .dashboard-section .section-title,
    .pipeline-section .section-title,
    .trends-section .section-title {{ margin-bottom: 12px; }}
    .kpi-grid {{ display: grid; grid-template-columns: repeat(2, 1fr); gap: 12px; }}
    .kpi-card {{
      background: {tokens.card_background};
      border: 1px solid {tokens.card_border};
      border-radius: 8px;
      padding: 16px;
      text-align: center;
    }}
    .kpi-label {{
      font-size: 12px;
      font-weight: 500;
      color: {tokens.foreground_muted};
      text-transform: uppercase;
      letter-spacing: 0.5px;
      margin-bottom: 4px;
    }}
    .kpi-value {{ font-size: 24px; font-weight: 700; color: {accent}; }}

    /* Tables */
    .pipeline-table, .trends-table {{ width: 100%; border-collapse: collapse; font-size: 13px; }}
    .pipeline-table th, .pipeline-table td,
    .trends-table th, .trends-table td {{
      padding: 8px 12px;
      text-align: left;
      border-bottom: 1px solid {tokens.border_muted};
    }}
    .pipeline-table th, .trends-table th {{
      font-weight: 600;
      color: {tokens.foreground_muted};
      font-size: 12px;
      text-transform: uppercase;
      letter-spacing: 0.5px;
      border-bottom: 2px solid {tokens.border};
    }}
    .pipeline-stage {{ white-space: nowrap; font-weight: 500; }}
    .pipeline-count {{ text-align: center; font-weight: 600; width: 60px; }}
    .pipeline-bar-cell {{ width: 40%; }}
    .pipeline-bar {{ height: 16px; border-radius: 4px; min-width: 4px; background-color: {accent}; }}
    .empty-state {{ color: {tokens.foreground_muted}; font-style: italic; text-align: center; }}

    /* Footer */
    .report-footer {{
      margin-top: 32px;
      padding-top: 16px;
      border-top: 1px solid {tokens.border};
      text-align: center;
    }}
    .footer-powered {{ font-size: 12px; color: {tokens.foreground_muted}; }}
    .footer-powered .brand {{ font-weight: 600; color: {accent}; }}
    .footer-copyright {{ font-size: 11px; color: {tokens.foreground_muted}; margin-top: 4px; }}
  """


# =============================================================================
# Section Renderers
# =============================================================================


def _render_content_sections(manual_content: Optional[ManualContent]) -> str:
    """Render the manual content sections that have non-blank content."""
    if manual_content is None:
        return ''

    blocks = []
    for field_name, key, title, description in CONTENT_SECTIONS:
        content = getattr(manual_content, field_name)
        if not content or not content.strip():
            continue
        blocks.append(f"""
  <div class="content-section" data-section="{key}">
    <div class="section-header">
      <h2 class="section-title">{title}</h2>
      <p class="section-description">{description}</p>
    </div>
    <div class="prose">{content}</div>
  </div>""")
    return ''.join(blocks)


def _render_kpi_cards(kpi: KPIData) -> str:
    cards = (
        ('New Leads', str(kpi.new_leads)),
        ('Total Pipeline', str(kpi.total_pipeline)),
        ('Priority Candidates', str(kpi.priority_candidates)),
        ('Weighted Pipeline Value', format_currency(kpi.weighted_pipeline_value)),
    )
    card_html = ''.join(f"""
      <div class="kpi-card">
        <div class="kpi-label">{label}</div>
        <div class="kpi-value">{value}</div>
      </div>""" for label, value in cards)

    return f"""
  <div class="dashboard-section" data-section="kpi">
    <h2 class="section-title">Dashboard Summary</h2>
    <div class="kpi-grid">{card_html}
    </div>
  </div>"""


def _render_pipeline_table(pipeline_by_stage: Sequence[PipelineByStagePoint]) -> str:
    if pipeline_by_stage:
        max_count = max([point.count for point in pipeline_by_stage] + [1])
        rows = ''.join(f"""
        <tr>
          <td class="pipeline-stage">{_esc(point.stage)}</td>
          <td class="pipeline-count">{point.count}</td>
          <td class="pipeline-bar-cell">
            <div class="pipeline-bar" style="width: {bar_width_percent(point.count, max_count):.1f}%;"></div>
          </td>
        </tr>""" for point in pipeline_by_stage)
    else:
        rows = """
        <tr><td class="empty-state" colspan="3">No pipeline data</td></tr>"""

    return f"""
  <div class="pipeline-section" data-section="pipeline">
    <h2 class="section-title">Pipeline by Stage</h2>
    <table class="pipeline-table">
      <thead>
        <tr><th>Stage</th><th>Count</th><th>Distribution</th></tr>
      </thead>
      <tbody>{rows}
      </tbody>
    </table>
  </div>"""


def _render_lead_trends_table(lead_trends: Sequence[LeadTrendPoint]) -> str:
    if lead_trends:
        rows = ''.join(f"""
        <tr><td>{_esc(point.week_label)}</td><td>{point.leads}</td></tr>"""
                       for point in lead_trends)
    else:
        rows = """
        <tr><td class="empty-state" colspan="2">No lead trend data</td></tr>"""

    return f"""
  <div class="trends-section" data-section="lead-trends">
    <h2 class="section-title">Lead Trends</h2>
    <table class="trends-table">
      <thead>
        <tr><th>Week Ending</th><th>Leads</th></tr>
      </thead>
      <tbody>{rows}
      </tbody>
    </table>
  </div>"""


def _render_header(
    tenant_name: str,
    tenant_logo_url: Optional[str],
    period: str,
    portal_name: str
) -> str:
    name = _esc(tenant_name)
    if tenant_logo_url:
        brand = f'<img src="{_esc(tenant_logo_url)}" alt="{name} logo" class="tenant-logo">'
        name_line = f'\n    <p class="tenant-name">{name}</p>'
    else:
        brand = f'<span class="tenant-name">{name}</span>'
        name_line = ''

    return f"""
  <div class="report-header">
    <div class="header-top">
      {brand}
      <span class="portal-badge">{_esc(portal_name)}</span>
    </div>
    <h1 class="report-title">Weekly Report</h1>
    <p class="report-period">{period}</p>{name_line}
  </div>"""


# =============================================================================
# Document
# =============================================================================


def render_report_document(
    report_week: ReportWeek,
    manual_content: Optional[ManualContent],
    kpi: KPIData,
    pipeline_by_stage: List[PipelineByStagePoint],
    lead_trends: List[LeadTrendPoint],
    branding_tokens: BrandingTokens,
    tenant_name: str,
    *,
    tenant_logo_url: Optional[str] = None,
    timezone: Optional[str] = None,
    generated_at: Optional[datetime] = None,
    portal_name: str = DEFAULT_PORTAL_NAME,
    platform_name: str = DEFAULT_PLATFORM_NAME
) -> str:
    """
    Render the full report document.

    Args:
        report_week: Week being reported; its period goes in the header.
        manual_content: Editor content; None or blank fields omit sections.
        kpi: Headline KPI figures.
        pipeline_by_stage: Pipeline table rows in display order.
        lead_trends: Lead trend rows, oldest first.
        branding_tokens: Resolved colour tokens.
        tenant_name: Display name used for co-branding.
        tenant_logo_url: Optional logo; the tenant name is shown as text
            when absent.
        timezone: IANA zone the period is displayed in.
        generated_at: Render time; pins the footer copyright year.
        portal_name: Header badge text.
        platform_name: Footer co-brand.

    Returns:
        Self-contained HTML document string.
    """
    period = format_period(report_week.period_start_at, report_week.period_end_at, timezone)
    year = (generated_at or datetime.now(dt_timezone.utc)).year
    platform = _esc(platform_name)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Weekly Report - {period}</title>
  <style>{_render_stylesheet(branding_tokens)}</style>
</head>
<body>{_render_header(tenant_name, tenant_logo_url, period, portal_name)}
{_render_content_sections(manual_content)}
{_render_kpi_cards(kpi)}
{_render_pipeline_table(pipeline_by_stage)}
{_render_lead_trends_table(lead_trends)}

  <div class="report-footer">
    <p class="footer-powered">Powered by <span class="brand">{platform}</span></p>
    <p class="footer-copyright">&copy; {year} {platform}. All rights reserved.</p>
  </div>
</body>
</html>"""
