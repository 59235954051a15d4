"""
Export Storage Sweep Job.

Removes PDF artifacts that no report_exports record points to, so the
storage directory converges back to one file per cached fingerprint.

Orphans arise when:
- A report week or tenant is deleted; its report_exports row is removed by
  the foreign key cascade but the file stays on disk.
- A process dies between writing a render's temporary file and publishing it.
  Leftover *.tmp files older than min_temp_age_seconds are removed; younger
  ones may belong to a render still in progress.

Usage:
    from report_export.jobs.export_sweep import sweep_orphaned_exports

    # Report what would be removed
    result = await sweep_orphaned_exports(dry_run=True)

    # Remove orphans
    result = await sweep_orphaned_exports()

See Also:
    - report_export/services/export.py: artifact naming and cache upsert
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from report_export.core.config import get_settings
from report_export.core.database import execute_query
from report_export.services.export import TEMP_SUFFIX, list_export_records
from report_export.sql.export_queries import EXPORT_REFERENCED_PATHS_QUERY


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Temp files younger than this may belong to an in-flight render
DEFAULT_MIN_TEMP_AGE_SECONDS: int = 3600


# =============================================================================
# Helpers
# =============================================================================


async def fetch_referenced_paths() -> Set[Path]:
    """Return the resolved artifact paths referenced by report_exports."""
    rows = await execute_query(EXPORT_REFERENCED_PATHS_QUERY)
    return {Path(row['pdf_url']).resolve() for row in rows if row['pdf_url']}


def _is_stale_temp(path: Path, min_age_seconds: float, now: float) -> bool:
    return now - path.stat().st_mtime >= min_age_seconds


# =============================================================================
# Job Entry Points
# =============================================================================


async def sweep_orphaned_exports(
    storage_dir: Optional[Union[str, Path]] = None,
    dry_run: bool = False,
    min_temp_age_seconds: float = DEFAULT_MIN_TEMP_AGE_SECONDS
) -> Dict[str, Any]:
    """
    Delete artifacts in the storage directory that no cache record references.

    Args:
        storage_dir: Directory to sweep; defaults to settings.pdf_storage_dir.
        dry_run: If True, report orphans without deleting them.
        min_temp_age_seconds: Minimum age of a *.tmp file before it counts
            as abandoned.

    Returns:
        Dict with:
        - success: False if the sweep could not run
        - scanned: Number of candidate files examined
        - removed: Paths removed (or that would be removed in a dry run)
        - kept: Number of referenced or too-recent files left alone
        - dry_run: Echo of the flag
        - error: Error message (if failed)
    """
    directory = Path(storage_dir or get_settings().pdf_storage_dir).resolve()

    if not directory.is_dir():
        return {
            'success': True,
            'scanned': 0,
            'removed': [],
            'kept': 0,
            'dry_run': dry_run,
        }

    try:
        referenced = await fetch_referenced_paths()
    except Exception as e:
        logger.error(f"Export sweep aborted, could not load cache records: {e}")
        return {
            'success': False,
            'error': f'Failed to load export records: {str(e)}',
            'dry_run': dry_run,
        }

    now = time.time()
    candidates = sorted(directory.glob('*.pdf')) + sorted(directory.glob(f'*{TEMP_SUFFIX}'))
    removed: List[str] = []
    kept = 0

    for path in candidates:
        if path.suffix == TEMP_SUFFIX:
            if not _is_stale_temp(path, min_temp_age_seconds, now):
                kept += 1
                continue
        elif path.resolve() in referenced:
            kept += 1
            continue

        if not dry_run:
            path.unlink(missing_ok=True)
        removed.append(str(path))

    logger.info(
        f"Export sweep of {directory}: scanned={len(candidates)}, "
        f"{'would remove' if dry_run else 'removed'}={len(removed)}, kept={kept}"
    )

    return {
        'success': True,
        'scanned': len(candidates),
        'removed': removed,
        'kept': kept,
        'dry_run': dry_run,
    }


async def get_export_status(
    tenant_id: Optional[str] = None,
    limit: int = 50
) -> Dict[str, Any]:
    """
    Summarize recent cached exports for monitoring.

    Args:
        tenant_id: Optional tenant filter.
        limit: Maximum number of records returned.

    Returns:
        Dict with:
        - total: Number of records returned
        - missing_files: Records whose artifact is no longer on disk
        - exports: Recent records (tenant, week, path, created_at, present)
    """
    records = await list_export_records(tenant_id=tenant_id, limit=limit)

    exports = []
    missing = 0
    for record in records:
        present = bool(record.pdf_url) and Path(record.pdf_url).is_file()
        if not present:
            missing += 1
        exports.append({
            'tenant_id': record.tenant_id,
            'report_week_id': record.report_week_id,
            'pdf_url': record.pdf_url,
            'created_at': record.created_at.isoformat() if record.created_at else None,
            'present': present,
        })

    return {
        'total': len(exports),
        'missing_files': missing,
        'exports': exports,
    }
