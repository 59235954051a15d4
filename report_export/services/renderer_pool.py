"""
Headless browser pool for PDF rendering.

Owns at most one Chromium instance, launched lazily through Playwright's async
API on first use and shared by every render in the process.

Lifecycle:
- acquire(): returns the live browser, launching it on first use. A browser
  that has disconnected (crash, killed process) is discarded and relaunched.
  Launch is serialized by a lock, so concurrent first-use callers share one
  instance.
- page(): async context manager yielding a fresh page. The page is closed on
  every exit path, including render errors.
- render_pdf(html): loads a document, waits for network idle and prints it
  with background graphics enabled.
- shutdown(): closes the browser and stops the Playwright driver. Safe to call
  repeatedly or before anything was launched; a later acquire() relaunches.

The pool is constructed once by the application lifespan and passed to the
export orchestrator.

Usage:
    pool = RendererPool(page_format='A4')
    pdf_bytes = await pool.render_pdf(html)
    await pool.shutdown()
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright


logger = logging.getLogger(__name__)


class RendererPool:
    """
    Single-instance Chromium pool.

    Attributes:
        page_format: Paper format passed to page.pdf() (e.g. 'A4').
        headless: Whether Chromium runs headless.
    """

    def __init__(self, page_format: str = 'A4', headless: bool = True):
        self.page_format = page_format
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """True when a connected browser instance is held."""
        return self._browser is not None and self._browser.is_connected()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def acquire(self) -> Browser:
        """
        Get the live browser, launching or relaunching it as needed.

        Raises:
            playwright.async_api.Error: If Chromium fails to launch.
        """
        async with self._lock:
            if self._browser is not None:
                if self._browser.is_connected():
                    return self._browser
                logger.warning("Renderer browser disconnected, relaunching")
                await self._close_browser()

            if self._playwright is None:
                self._playwright = await async_playwright().start()

            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            logger.info(f"Launched Chromium renderer (headless={self.headless})")
            return self._browser

    async def release(self, page: Page) -> None:
        """Close a page. Close errors are logged so they never mask a render error."""
        try:
            await page.close()
        except Exception as e:
            logger.warning(f"Failed to close renderer page: {e}")

    async def shutdown(self) -> None:
        """Close the browser and stop the driver. Idempotent."""
        async with self._lock:
            if self._browser is None and self._playwright is None:
                return

            await self._close_browser()

            if self._playwright is not None:
                playwright = self._playwright
                self._playwright = None
                await playwright.stop()

            logger.info("Renderer shut down")

    async def _close_browser(self) -> None:
        browser = self._browser
        self._browser = None
        if browser is None:
            return
        try:
            await browser.close()
        except Exception as e:
            # A crashed browser can refuse to close; it is dropped either way
            logger.warning(f"Error closing renderer browser: {e}")

    # =========================================================================
    # Rendering
    # =========================================================================

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield a new page on the live browser and always close it afterwards."""
        browser = await self.acquire()
        new_page = await browser.new_page()
        try:
            yield new_page
        finally:
            await self.release(new_page)

    async def render_pdf(self, html: str) -> bytes:
        """
        Render an HTML document to PDF bytes.

        The document is loaded with set_content and considered ready once the
        network is idle, so embedded images (tenant logos) are loaded before
        printing.

        Args:
            html: Complete self-contained HTML document.

        Returns:
            PDF file contents.

        Raises:
            playwright.async_api.Error: On launch failure or page crash.
        """
        async with self.page() as page:
            await page.set_content(html, wait_until='networkidle')
            pdf_bytes = await page.pdf(format=self.page_format, print_background=True)

        logger.info(f"Rendered PDF ({len(pdf_bytes)} bytes, format={self.page_format})")
        return pdf_bytes
