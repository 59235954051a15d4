"""
Maintenance Jobs for the Report Export Service.

- export_sweep.py: removes PDF artifacts no cache record points to and
  reports on recent exports

Usage Examples:
---------------
    from report_export.jobs import sweep_orphaned_exports, get_export_status

    result = await sweep_orphaned_exports(dry_run=True)
    status = await get_export_status(limit=20)
"""

from report_export.jobs.export_sweep import (
    sweep_orphaned_exports,
    get_export_status,
    fetch_referenced_paths,
)

__all__ = [
    "sweep_orphaned_exports",
    "get_export_status",
    "fetch_referenced_paths",
]
