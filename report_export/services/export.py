"""
Report export orchestrator.

Produces the PDF snapshot of a published report week and caches it, so every
later request for the same (tenant_id, report_week_id) fingerprint returns the
stored file without rendering again.

Flow (export_report):
1. Cache lookup in report_exports. A record whose file still exists on disk
   is returned immediately.
2. On a miss (or a stale record whose file vanished), the report week, manual
   content, KPIs, pipeline by stage, lead trends and tenant branding are
   fetched concurrently. A missing report week fails the export.
3. Branding tokens and tenant display name are resolved.
4. The HTML document is rendered, then printed to PDF by the RendererPool.
5. The bytes are written to a temporary file beside the final path.
6. The cache record is upserted. Only after it succeeds is the temporary file
   moved onto {tenant_id}_{report_week_id}.pdf. A failed upsert removes the
   temporary file, so no unreferenced artifact is left behind.
7. The absolute artifact path is returned.

Concurrency:
- Concurrent calls for the same fingerprint share one in-flight task; the
  render runs once and every caller gets the same path.
- Different fingerprints export in parallel.

Idempotency:
- One file and one report_exports row per fingerprint. The upsert keeps the
  row unique even if another process renders the same week.
"""

import asyncio
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from report_export.core.config import Settings, get_settings
from report_export.core.database import get_db_pool
from report_export.models.schemas import ExportCacheRecord
from report_export.services.branding import resolve_branding
from report_export.services.dashboard import (
    fetch_kpi_data,
    fetch_lead_trends,
    fetch_pipeline_by_stage,
)
from report_export.services.document import render_report_document
from report_export.services.renderer_pool import RendererPool
from report_export.services.report_weeks import (
    fetch_manual_content,
    fetch_report_week,
    fetch_tenant_branding,
)
from report_export.sql.export_queries import (
    EXPORT_CACHE_LOOKUP_QUERY,
    EXPORT_CACHE_UPSERT_QUERY,
    get_export_records_query,
)


logger = logging.getLogger(__name__)


# Display name used when the tenant record has no name
DEFAULT_TENANT_NAME = 'Your Organization'

TEMP_SUFFIX = '.tmp'


class ReportWeekNotFoundError(LookupError):
    """Raised when a report week does not exist for the requesting tenant."""

    def __init__(self, tenant_id: str, report_week_id: str):
        self.tenant_id = tenant_id
        self.report_week_id = report_week_id
        super().__init__(f"Report week {report_week_id} not found for tenant {tenant_id}")


# =============================================================================
# Cache Record Access
# =============================================================================


async def get_cached_export(tenant_id: str, report_week_id: str) -> Optional[ExportCacheRecord]:
    """Get the report_exports record for a fingerprint, or None."""
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        row = await conn.fetchrow(EXPORT_CACHE_LOOKUP_QUERY, tenant_id, report_week_id)

    if row is None:
        return None
    return ExportCacheRecord(**dict(row))


async def upsert_export_record(
    tenant_id: str,
    report_week_id: str,
    pdf_url: str,
    created_at: Optional[datetime] = None
) -> ExportCacheRecord:
    """
    Insert the cache record, or update its path and timestamp on conflict.

    Args:
        tenant_id: Tenant identifier.
        report_week_id: Report week identifier.
        pdf_url: Absolute path of the artifact.
        created_at: Record timestamp; defaults to now (naive UTC, matching
            the timestamp column).

    Returns:
        The stored ExportCacheRecord.

    Raises:
        asyncpg.PostgresError: If the upsert fails.
    """
    if created_at is None:
        created_at = datetime.now(timezone.utc).replace(tzinfo=None)

    pool = await get_db_pool()

    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            EXPORT_CACHE_UPSERT_QUERY,
            tenant_id,
            report_week_id,
            pdf_url,
            created_at
        )

    return ExportCacheRecord(**dict(row))


async def list_export_records(
    tenant_id: Optional[str] = None,
    limit: int = 50
) -> List[ExportCacheRecord]:
    """List cache records, newest first, optionally for one tenant."""
    pool = await get_db_pool()

    async with pool.acquire() as conn:
        if tenant_id is not None:
            rows = await conn.fetch(get_export_records_query(by_tenant=True), tenant_id, limit)
        else:
            rows = await conn.fetch(get_export_records_query(), limit)

    return [ExportCacheRecord(**dict(row)) for row in rows]


# =============================================================================
# Orchestrator
# =============================================================================


class ReportExporter:
    """
    Cached PDF export of report weeks.

    Constructed once at application startup with the shared RendererPool.

    Attributes:
        renderer: Pool used to print documents to PDF.
        storage_dir: Absolute directory holding the artifacts.
    """

    def __init__(
        self,
        renderer: RendererPool,
        storage_dir: Optional[Union[str, Path]] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.renderer = renderer
        self.storage_dir = Path(storage_dir or self.settings.pdf_storage_dir).resolve()
        self._in_flight: Dict[Tuple[str, str], asyncio.Task] = {}

    def artifact_path(self, tenant_id: str, report_week_id: str) -> Path:
        """Deterministic artifact location for a fingerprint."""
        return self.storage_dir / f"{tenant_id}_{report_week_id}.pdf"

    async def export_report(self, tenant_id: str, report_week_id: str) -> str:
        """
        Export a report week to PDF, reusing the cached artifact when present.

        Args:
            tenant_id: Tenant requesting the export.
            report_week_id: Report week to export. Callers must only pass
                published weeks.

        Returns:
            Absolute path of the PDF artifact.

        Raises:
            ReportWeekNotFoundError: If the week does not exist for the tenant.
            asyncpg.PostgresError: If a query or the cache upsert fails.
            playwright.async_api.Error: If rendering fails.
        """
        key = (tenant_id, report_week_id)
        task = self._in_flight.get(key)

        if task is None:
            task = asyncio.ensure_future(self._export(tenant_id, report_week_id))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.info(f"Joining in-flight export for {tenant_id}/{report_week_id}")

        # One caller being cancelled must not cancel the shared render
        return await asyncio.shield(task)

    def _forget(self, key: Tuple[str, str], task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

        # Retrieve the outcome so a failure nobody is awaiting still gets reported
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Export {key[0]}/{key[1]} failed: {task.exception()}")

    async def shutdown_renderer(self) -> None:
        """Shut down the rendering engine; called at process termination."""
        await self.renderer.shutdown()

    # =========================================================================
    # Internals
    # =========================================================================

    async def _export(self, tenant_id: str, report_week_id: str) -> str:
        cached = await get_cached_export(tenant_id, report_week_id)
        if cached is not None and cached.pdf_url and Path(cached.pdf_url).exists():
            logger.info(f"Export cache hit for {tenant_id}/{report_week_id}")
            return cached.pdf_url

        if cached is not None:
            logger.warning(
                f"Export cache record for {tenant_id}/{report_week_id} points to a "
                f"missing file ({cached.pdf_url}), re-rendering"
            )
        else:
            logger.info(f"Export cache miss for {tenant_id}/{report_week_id}")

        report_week, manual_content, kpi, pipeline, lead_trends, branding = await asyncio.gather(
            fetch_report_week(report_week_id, tenant_id),
            fetch_manual_content(report_week_id),
            fetch_kpi_data(tenant_id, report_week_id=report_week_id),
            fetch_pipeline_by_stage(tenant_id, report_week_id=report_week_id),
            fetch_lead_trends(tenant_id, weeks=self.settings.lead_trend_weeks),
            fetch_tenant_branding(tenant_id),
        )

        if report_week is None:
            raise ReportWeekNotFoundError(tenant_id, report_week_id)

        tokens = resolve_branding(
            branding.theme_id or self.settings.default_theme_id,
            branding.accent_color_override,
        )

        html = render_report_document(
            report_week,
            manual_content,
            kpi,
            pipeline,
            lead_trends,
            tokens,
            branding.tenant_name or DEFAULT_TENANT_NAME,
            tenant_logo_url=branding.tenant_logo_url,
            timezone=branding.timezone or self.settings.default_timezone,
            generated_at=datetime.now(timezone.utc),
            portal_name=self.settings.portal_name,
            platform_name=self.settings.platform_name,
        )

        pdf_bytes = await self.renderer.render_pdf(html)
        return await self._store(tenant_id, report_week_id, pdf_bytes)

    async def _store(self, tenant_id: str, report_week_id: str, pdf_bytes: bytes) -> str:
        """Write the artifact, upsert its cache record, then publish the file."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        final_path = self.artifact_path(tenant_id, report_week_id)
        temp_path = final_path.with_name(f"{final_path.name}.{uuid.uuid4().hex}{TEMP_SUFFIX}")
        temp_path.write_bytes(pdf_bytes)

        try:
            await upsert_export_record(tenant_id, report_week_id, str(final_path))
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        os.replace(temp_path, final_path)
        logger.info(f"Stored PDF export {final_path} ({len(pdf_bytes)} bytes)")
        return str(final_path)
