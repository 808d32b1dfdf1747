"""
Chat feature: Server-side stream relay.

Turns the orchestrator's event stream into SSE text for StreamingResponse.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from app.features.chat.schemas import ChunkEvent, DoneEvent, ErrorEvent, is_terminal
from app.features.chat.sse import HEARTBEAT, encode_event

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def sse_stream(events: AsyncIterator[ChunkEvent | DoneEvent | ErrorEvent]) -> AsyncIterator[str]:
    """Heartbeat comment, then every event up to and including the terminal one."""
    yield HEARTBEAT
    chunk_count = 0
    try:
        async for event in events:
            yield encode_event(event)
            if is_terminal(event):
                logger.info(f"Stream finished with '{event.type}' after {chunk_count} chunks")
                return
            chunk_count += 1
    finally:
        # A disconnect cancels this task; the shielded close still runs to the end.
        await asyncio.shield(events.aclose())
