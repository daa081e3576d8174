"""Drive headless Chromium (via Playwright) to print a composed document to PDF.

One browser process per render call, never pooled. The page and the browser
are closed on every exit path: success, load timeout, engine error, and task
cancellation (including the overall deadline enforced with ``wait_for``).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from config.settings import RenderSettings
from observability.logging_config import get_logger
from shiftreport.common.exceptions import RenderError
from shiftreport.reporting.types import ComposedDocument

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PDF_FILENAME = "parte-jefatura.pdf"

# A4 at 96 dpi, doubled for crisp raster content.
VIEWPORT = {"width": 794, "height": 1123}
DEVICE_SCALE_FACTOR = 2
PAGE_FORMAT = "A4"
PAGE_MARGINS = {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"}

BASE_LAUNCH_ARGS = ("--disable-gpu", "--font-render-hinting=none")
PRODUCTION_LAUNCH_ARGS = ("--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage")

PlaywrightFactory = Callable[[], AsyncContextManager[Any]]


@dataclass(frozen=True)
class RenderedArtifact:
    content: bytes
    content_type: str = PDF_CONTENT_TYPE
    filename: str = PDF_FILENAME

    @property
    def size(self) -> int:
        return len(self.content)


async def _close_quietly(resource: Any, what: str) -> None:
    try:
        await resource.close()
    except PlaywrightError as exc:
        logger.warning("Failed to close %s", what, extra={"error": str(exc)})


class PdfRenderer:
    """Render ``ComposedDocument`` objects into A4 PDFs."""

    def __init__(
        self,
        settings: RenderSettings,
        *,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        self.settings = settings
        self._playwright_factory = playwright_factory

    def launch_options(self, executable_path: str) -> dict[str, Any]:
        args = list(BASE_LAUNCH_ARGS)
        if self.settings.is_production:
            args.extend(PRODUCTION_LAUNCH_ARGS)
        return {"executable_path": executable_path, "headless": True, "args": args}

    async def render(self, document: ComposedDocument, executable_path: str) -> RenderedArtifact:
        """Single render attempt under the overall deadline; no retries."""
        try:
            return await asyncio.wait_for(
                self._render_once(document, executable_path),
                timeout=self.settings.overall_timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise RenderError(
                f"Render exceeded the {self.settings.overall_timeout_s:g}s deadline"
            ) from exc

    async def _render_once(self, document: ComposedDocument, executable_path: str) -> RenderedArtifact:
        try:
            async with self._playwright_factory() as pw:
                browser = await pw.chromium.launch(**self.launch_options(executable_path))
                try:
                    content = await self._print(browser, document)
                finally:
                    await _close_quietly(browser, "browser")
        except PlaywrightTimeoutError as exc:
            raise RenderError(
                f"Document did not load within {self.settings.load_timeout_s:g}s"
            ) from exc
        except PlaywrightError as exc:
            raise RenderError(f"Rendering engine failed: {exc}") from exc
        except Exception as exc:
            # Driver start-up failures (e.g. the node subprocess cannot be spawned).
            raise RenderError(f"Rendering engine failed: {type(exc).__name__}") from exc

        return RenderedArtifact(content=content)

    async def _print(self, browser: Any, document: ComposedDocument) -> bytes:
        page = await browser.new_page(viewport=VIEWPORT, device_scale_factor=DEVICE_SCALE_FACTOR)
        try:
            await page.set_content(
                document.html,
                wait_until="load",
                timeout=self.settings.load_timeout_s * 1000,
            )
            return await page.pdf(
                format=PAGE_FORMAT,
                print_background=True,
                margin=PAGE_MARGINS,
            )
        finally:
            await _close_quietly(page, "page")


__all__ = ["PdfRenderer", "RenderedArtifact"]
