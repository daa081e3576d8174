"""Resolve which Chromium executable the render step should launch.

Order (first hit wins):

1. ``PUPPETEER_EXECUTABLE_PATH`` / ``CHROME_EXECUTABLE_PATH``, trusted as-is.
2. In production, the Chromium build managed by Playwright.
3. Well-known install locations for the current platform, if present on disk.
4. The Playwright-managed build again, as a last resort.

The path is resolved on every render call and never cached, so changes to
the environment or to installed browsers are picked up without a restart.
"""

from __future__ import annotations

import os
import sys
from typing import Awaitable, Callable, Optional, Sequence

from playwright.async_api import async_playwright

from config.settings import RenderSettings
from observability.logging_config import get_logger
from shiftreport.common.exceptions import EngineUnavailableError

logger = get_logger(__name__)

ManagedResolver = Callable[[], Awaitable[Optional[str]]]

DARWIN_CANDIDATES = (
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
)
WINDOWS_CANDIDATES = (
    "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    "C:\\Program Files\\Chromium\\Application\\chrome.exe",
)
LINUX_CANDIDATES = (
    "/usr/bin/google-chrome-stable",
    "/usr/bin/google-chrome",
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
)


def platform_candidates(platform: str | None = None) -> Sequence[str]:
    platform = platform or sys.platform
    if platform == "darwin":
        return DARWIN_CANDIDATES
    if platform.startswith("win"):
        return WINDOWS_CANDIDATES
    return LINUX_CANDIDATES


async def playwright_managed_executable() -> str | None:
    """Path of the Chromium build installed by ``playwright install chromium``.

    Only the Playwright driver is started here; no browser is launched.
    """
    try:
        async with async_playwright() as pw:
            path = pw.chromium.executable_path
    except Exception as exc:
        logger.warning(
            "Playwright driver unavailable",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        return None
    return path if path and os.path.exists(path) else None


async def _managed_or_fail(managed_resolver: ManagedResolver, *, source: str) -> str:
    path = await managed_resolver()
    if not path:
        raise EngineUnavailableError(
            "No rendering engine available; set CHROME_EXECUTABLE_PATH "
            "or run `playwright install chromium`."
        )
    logger.info("Using managed rendering engine", extra={"source": source})
    return path


async def resolve_executable_path(
    settings: RenderSettings,
    *,
    managed_resolver: ManagedResolver = playwright_managed_executable,
    platform: str | None = None,
    exists: Callable[[str], bool] = os.path.exists,
) -> str:
    """Return the executable to launch, or raise ``EngineUnavailableError``."""
    override = (settings.executable_override or "").strip()
    if override:
        return override

    if settings.is_production:
        return await _managed_or_fail(managed_resolver, source="production")

    candidates = platform_candidates(platform)
    for candidate in candidates:
        if exists(candidate):
            return candidate

    logger.warning(
        "No local browser found; falling back to the managed engine",
        extra={"checked": list(candidates)},
    )
    return await _managed_or_fail(managed_resolver, source="fallback")


__all__ = [
    "platform_candidates",
    "playwright_managed_executable",
    "resolve_executable_path",
]
