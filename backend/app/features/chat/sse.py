"""
Chat feature: server-sent event framing.

Wire format (one frame per event, UTF-8, terminated by a blank line):

    data: {"type": "chunk", "text": "..."}\\n\\n
    event: done\\n
    data: {"text": "...", "citations": [...]}\\n\\n
    : comment / heartbeat\\n\\n

`data:` lines of one frame are joined with "\\n". An `event:` line names the
event type when the JSON body does not carry one.
"""

import json

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import FrameParseError
from app.features.chat.schemas import ChunkEvent, DoneEvent, ErrorEvent, stream_event_adapter

FRAME_BOUNDARY = b"\n\n"
HEARTBEAT = ": connected\n\n"


def encode_event(event: ChunkEvent | DoneEvent | ErrorEvent, named: bool = False) -> str:
    """Serialize one event as a complete SSE frame."""
    body = json.dumps(event.model_dump(exclude_none=True), ensure_ascii=False)
    if named:
        return f"event: {event.type}\ndata: {body}\n\n"
    return f"data: {body}\n\n"


def parse_frame(frame: str) -> ChunkEvent | DoneEvent | ErrorEvent | None:
    """Decode one frame (without its trailing blank line).

    Returns:
        The event, or None for comment-only / empty frames.

    Raises:
        FrameParseError: If the payload is not JSON or not a known event.
    """
    event_name: str | None = None
    data_lines: list[str] = []

    for line in frame.split("\n"):
        if not line or line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event_name = value.strip()
        elif field == "data":
            data_lines.append(value)
        # id:, retry: and unknown fields are ignored

    if not data_lines:
        return None

    raw = "\n".join(data_lines)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FrameParseError(f"Invalid JSON in frame: {raw[:200]!r}") from e

    if not isinstance(payload, dict):
        raise FrameParseError(f"Frame payload is not an object: {raw[:200]!r}")
    if event_name and "type" not in payload:
        payload["type"] = event_name

    try:
        return stream_event_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise FrameParseError(f"Unknown or malformed event: {raw[:200]!r}") from e


class FrameDecoder:
    """Reassembles SSE frames from arbitrarily fragmented reads.

    Bytes are kept in a retained buffer; only complete frames are decoded, so
    a multibyte UTF-8 character split across two reads is handled.

    Usage:
        decoder.feed(raw)
        while (event := decoder.next_event()) is not None:
            dispatch(event)
        ...
        for event in decoder.finish():
            dispatch(event)
    """

    def __init__(self):
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet decoded."""
        return len(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)
        # CRLF → LF. A lone trailing "\r" waits for its "\n" in the next read.
        if b"\r\n" in self._buffer:
            self._buffer = bytearray(self._buffer.replace(b"\r\n", b"\n"))

    def next_event(self) -> ChunkEvent | DoneEvent | ErrorEvent | None:
        """Decode the next complete frame, skipping comment-only frames.

        Returns:
            The next event, or None when no complete frame is buffered.

        Raises:
            FrameParseError: If a complete frame is malformed. The frame is
                consumed, so decoding can resume after it.
        """
        while True:
            boundary = self._buffer.find(FRAME_BOUNDARY)
            if boundary == -1:
                return None
            frame = bytes(self._buffer[:boundary])
            del self._buffer[:boundary + len(FRAME_BOUNDARY)]
            event = parse_frame(_decode(frame))
            if event is not None:
                return event

    def finish(self) -> list[ChunkEvent | DoneEvent | ErrorEvent]:
        """Decode everything left once the stream has ended.

        A final frame without its trailing blank line is still valid.
        """
        events = []
        while (event := self.next_event()) is not None:
            events.append(event)

        remainder = bytes(self._buffer).rstrip(b"\r\n")
        self._buffer.clear()
        if remainder.strip():
            event = parse_frame(_decode(remainder))
            if event is not None:
                events.append(event)
        return events


def _decode(frame: bytes) -> str:
    try:
        return frame.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FrameParseError(f"Frame is not valid UTF-8: {frame[:80]!r}") from e
