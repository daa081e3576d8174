"""Cancel in-flight work when the HTTP client goes away.

Starlette does not cancel a handler when the client disconnects, so a long
render would otherwise keep its browser process alive for nothing. The
pipeline runs as a task; if the client disconnects first the task is
cancelled, which closes the page and the browser on the way out.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, TypeVar

from fastapi import HTTPException, Request

from observability.logging_config import get_logger

T = TypeVar("T")

DISCONNECT_POLL_S = 0.5
CLIENT_CLOSED_REQUEST = 499

logger = get_logger(__name__)


async def run_until_disconnect(
    request: Request,
    work: Awaitable[T],
    poll_interval_s: float = DISCONNECT_POLL_S,
) -> T:
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval_s)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("Client disconnected; cancelling report generation")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Cliente desconectado.")
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


__all__ = ["run_until_disconnect"]
