"""
Chat feature: Streaming client for the /api/chat endpoint.

Reads the response body as it arrives, decodes SSE frames and dispatches
each event to a callback before reading again. Exactly one of on_done /
on_error fires per request unless the stream is cancelled, in which case
no callback fires after cancel().

Usage:
    client = ChatStreamClient(httpx.AsyncClient(base_url="http://localhost:8000"))
    stream = client.start(ChatRequest(message="관찰일지 쓰는 법 알려줘"), callbacks)
    ...
    stream.cancel()       # optional
    await stream.wait()
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from app.core.exceptions import FrameParseError
from app.features.chat.schemas import ChatRequest, ChunkEvent, DoneEvent, ErrorEvent
from app.features.chat.sse import FrameDecoder

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "서버에 연결하지 못했습니다. 잠시 후 다시 시도해 주세요."
INCOMPLETE_STREAM_MESSAGE = "응답이 완료되기 전에 연결이 종료되었습니다."


@dataclass
class StreamCallbacks:
    on_chunk: Callable[[str], None]
    on_done: Callable[[DoneEvent], None]
    on_error: Callable[[str], None]


class ChatStream:
    """Handle for one in-flight chat request."""

    def __init__(self, callbacks: StreamCallbacks):
        self.callbacks = callbacks
        self.session_id: str | None = None
        self.cancelled = False
        self.resolved = False  # a terminal callback has fired
        self._task: asyncio.Task | None = None

    def cancel(self) -> None:
        """Stop reading, release the connection, suppress further callbacks.

        Safe to call from inside a callback.
        """
        if self.cancelled or self.resolved:
            return
        self.cancelled = True
        # From inside a callback the reader loop sees the flag and exits itself.
        if self._task is not None and asyncio.current_task() is not self._task:
            self._task.cancel()

    async def wait(self) -> None:
        if self._task is None:
            return
        await asyncio.wait({self._task})
        if not self._task.cancelled():
            self._task.result()

    # ── Dispatch (synchronous, strictly ordered) ─────────

    def dispatch(self, event: ChunkEvent | DoneEvent | ErrorEvent) -> bool:
        """Deliver one event. Returns True once the stream is finished."""
        if self.cancelled or self.resolved:
            return True
        match event:
            case ChunkEvent(text=text):
                self.callbacks.on_chunk(text)
                return self.cancelled
            case DoneEvent():
                self.resolved = True
                self.callbacks.on_done(event)
            case ErrorEvent(message=message):
                self.resolved = True
                self.callbacks.on_error(message)
        return True

    def fail(self, message: str) -> None:
        if self.cancelled or self.resolved:
            return
        self.resolved = True
        self.callbacks.on_error(message)


class ChatStreamClient:
    def __init__(self, http: httpx.AsyncClient, path: str = "/api/chat"):
        self.http = http
        self.path = path

    def start(self, request: ChatRequest, callbacks: StreamCallbacks) -> ChatStream:
        """Begin a request in the background and return its handle."""
        stream = ChatStream(callbacks)
        stream._task = asyncio.ensure_future(self._consume(request, stream))
        return stream

    async def run(self, request: ChatRequest, callbacks: StreamCallbacks) -> ChatStream:
        """Run a request to completion (or cancellation)."""
        stream = self.start(request, callbacks)
        await stream.wait()
        return stream

    async def _consume(self, request: ChatRequest, stream: ChatStream) -> None:
        payload = request.model_dump(by_alias=True, exclude_none=True)
        decoder = FrameDecoder()
        try:
            async with self.http.stream(
                "POST",
                self.path,
                json=payload,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    logger.error(f"Chat request rejected: HTTP {response.status_code}")
                    stream.fail(f"요청이 거부되었습니다. (HTTP {response.status_code})")
                    return

                stream.session_id = response.headers.get("x-session-id")
                async for data in response.aiter_bytes():
                    decoder.feed(data)
                    while (event := decoder.next_event()) is not None:
                        if stream.dispatch(event):
                            return

                for event in decoder.finish():
                    if stream.dispatch(event):
                        return

        except FrameParseError as e:
            logger.error(f"Malformed stream frame: {e.detail}")
            stream.fail(e.message)
            return
        except httpx.HTTPError as e:
            logger.error(f"Chat stream connection error: {e}")
            stream.fail(CONNECTION_ERROR_MESSAGE)
            return

        logger.warning("Chat stream closed without a terminal event")
        stream.fail(INCOMPLETE_STREAM_MESSAGE)
