from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from askdata.errors import ServiceTimeoutError

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: float | None, *, what: str = "call") -> T:
    """Await with a deadline, raising ServiceTimeoutError when it passes."""

    if timeout is None or timeout <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise ServiceTimeoutError(f"{what} timed out after {timeout:.1f}s") from exc
