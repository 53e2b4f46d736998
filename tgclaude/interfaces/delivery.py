"""Ordered, paced delivery of reply chunks."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence


async def deliver_chunks(
    send: Callable[[str], Awaitable[Any]],
    chunks: Sequence[str],
    pacing_seconds: float = 0.5,
) -> int:
    """Send chunks one at a time, waiting pacing_seconds between them. Returns the number sent."""
    for index, chunk in enumerate(chunks):
        if index and pacing_seconds > 0:
            await asyncio.sleep(pacing_seconds)
        await send(chunk)
    return len(chunks)
