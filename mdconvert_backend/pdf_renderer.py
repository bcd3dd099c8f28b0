from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .schemas import ConversionOptions

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

_WAIT_FOR_FONTS = """async () => { if (document.fonts && document.fonts.ready) { await document.fonts.ready; } }"""


class PdfRenderError(RuntimeError):
    """Raised when Chromium fails to turn a document into a PDF."""


class PdfRenderer:
    """Prints HTML documents to PDF with one shared headless Chromium.

    The browser is launched on first use and relaunched whenever it reports
    itself disconnected. Every render gets its own page, which is closed
    whether or not printing succeeds.
    """

    def __init__(self, launch_args: Optional[list[str]] = None, playwright_factory=async_playwright) -> None:
        self._launch_args = list(LAUNCH_ARGS if launch_args is None else launch_args)
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._launch_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> Browser:
        if self.is_connected:
            return self._browser

        async with self._launch_lock:
            if self.is_connected:
                return self._browser
            if self._browser is not None:
                logger.warning("Chromium disconnected; relaunching")
                await self._close_browser()
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
            logger.info("Launching headless Chromium")
            self._browser = await self._playwright.chromium.launch(headless=True, args=self._launch_args)
            return self._browser

    async def render(self, html: str, options: Optional[ConversionOptions] = None) -> bytes:
        options = options or ConversionOptions()
        margin = f"{options.margin}mm"
        started = time.perf_counter()

        page = None
        try:
            browser = await self.get_browser()
            page = await browser.new_page()
            await page.set_content(html, wait_until="networkidle")

            # Wait for web fonts to load if the document uses any.
            try:
                await page.evaluate(_WAIT_FOR_FONTS)
            except PlaywrightError:
                logger.debug("document.fonts.ready was not available", exc_info=True)

            pdf_bytes = await page.pdf(
                format=options.page_size,
                landscape=options.orientation == "landscape",
                print_background=True,
                prefer_css_page_size=True,
                margin={"top": margin, "right": margin, "bottom": margin, "left": margin},
            )
        except PlaywrightError as exc:
            raise PdfRenderError(str(exc)) from exc
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError:
                    logger.warning("Failed to close page after rendering", exc_info=True)

        logger.debug("Rendered PDF bytes=%d in %.0fms", len(pdf_bytes), (time.perf_counter() - started) * 1000)
        return pdf_bytes

    async def _close_browser(self) -> None:
        browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            await browser.close()
        except PlaywrightError:
            logger.debug("Browser was already gone", exc_info=True)

    async def close(self) -> None:
        await self._close_browser()
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            await playwright.stop()
