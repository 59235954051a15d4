'''
Report Export Test Suite

Test Modules:
-------------
- test_branding.py: Stage classifier and branding resolver
  - Priority / full-pipeline stage membership
  - darken / contrast_text colour arithmetic
  - Theme fallback and accent override rules

- test_dashboard.py: Dashboard aggregation
  - KPI totals, weighted pipeline value, new-lead windows
  - Live vs report-week snapshot scope
  - Lead trend grouping and ordering

- test_document.py: HTML report document
  - Section omission and empty states
  - Escaping of tenant-supplied values
  - Self-contained output (one inline stylesheet, no scripts)

- test_renderer_pool.py: Chromium pool lifecycle (Playwright mocked)
- test_report_weeks.py: Report week, manual content and branding lookups
- test_export.py: Cached export orchestration and single-flight renders
- test_export_sweep.py: Orphaned artifact sweep job
- test_api.py: POST / GET /reports/{id}/pdf
- test_config.py: Settings validation

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

No database or browser is needed; asyncpg pools and Playwright are mocked.
See conftest.py for shared fixtures.
'''

__all__ = []
