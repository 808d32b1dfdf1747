"""Unit tests for SSE frame encoding and incremental decoding."""

import pytest

from app.core.exceptions import FrameParseError
from app.features.chat.schemas import ChunkEvent, DoneEvent, ErrorEvent
from app.features.chat.sse import HEARTBEAT, FrameDecoder, encode_event, parse_frame

EVENTS = [
    ChunkEvent(text="관찰일지는 "),
    ChunkEvent(text="사실과 해석을 구분해 씁니다."),
    DoneEvent(
        text="관찰일지는 사실과 해석을 구분해 씁니다.",
        citations=["[출처1] 표준보육과정 해설서, p.34"],
    ),
]


def _wire(events=EVENTS) -> bytes:
    return (HEARTBEAT + "".join(encode_event(e) for e in events)).encode("utf-8")


def _decode_in_pieces(raw: bytes, cuts: list[int]) -> list:
    decoder = FrameDecoder()
    events = []
    start = 0
    for cut in [*cuts, len(raw)]:
        decoder.feed(raw[start:cut])
        while (event := decoder.next_event()) is not None:
            events.append(event)
        start = cut
    events.extend(decoder.finish())
    return events


class TestEncodeEvent:
    def test_generic_frame(self):
        frame = encode_event(ChunkEvent(text="안녕"))
        assert frame == 'data: {"type": "chunk", "text": "안녕"}\n\n'

    def test_named_frame(self):
        frame = encode_event(ErrorEvent(message="실패"), named=True)
        assert frame.startswith("event: error\ndata: ")
        assert frame.endswith("\n\n")

    def test_done_omits_absent_optional_fields(self):
        frame = encode_event(DoneEvent(text="끝"))
        assert "feedback" not in frame
        assert "session_id" not in frame
        assert '"citations": []' in frame


class TestFrameDecoder:
    def test_whole_stream_in_one_read(self):
        assert _decode_in_pieces(_wire(), []) == EVENTS

    def test_every_single_split_point(self):
        raw = _wire()
        for cut in range(len(raw) + 1):
            assert _decode_in_pieces(raw, [cut]) == EVENTS, f"split at byte {cut}"

    def test_byte_by_byte(self):
        raw = _wire()
        assert _decode_in_pieces(raw, list(range(1, len(raw)))) == EVENTS

    def test_crlf_line_endings(self):
        raw = _wire().replace(b"\n", b"\r\n")
        for cut in range(len(raw) + 1):
            assert _decode_in_pieces(raw, [cut]) == EVENTS, f"split at byte {cut}"

    def test_partial_frame_is_retained(self):
        decoder = FrameDecoder()
        decoder.feed(b'data: {"type": "chunk", "te')
        assert decoder.next_event() is None
        assert decoder.pending > 0

        decoder.feed(b'xt": "a"}\n\n')
        assert decoder.next_event() == ChunkEvent(text="a")
        assert decoder.pending == 0

    def test_comment_frames_are_skipped(self):
        decoder = FrameDecoder()
        decoder.feed(b": connected\n\n: keep-alive\n\n")
        assert decoder.next_event() is None
        assert decoder.finish() == []

    def test_named_event_supplies_type(self):
        decoder = FrameDecoder()
        decoder.feed('event: done\ndata: {"text": "완료", "citations": []}\n\n'.encode("utf-8"))
        assert decoder.next_event() == DoneEvent(text="완료", citations=[])

    def test_multiple_data_lines_are_joined(self):
        decoder = FrameDecoder()
        decoder.feed(b'data: {"type": "chunk",\ndata: "text": "x"}\n\n')
        assert decoder.next_event() == ChunkEvent(text="x")

    def test_finish_parses_trailing_frame_without_boundary(self):
        decoder = FrameDecoder()
        decoder.feed('data: {"type": "error", "message": "중단"}'.encode("utf-8"))
        assert decoder.next_event() is None
        assert decoder.finish() == [ErrorEvent(message="중단")]

    def test_finish_on_empty_buffer(self):
        assert FrameDecoder().finish() == []

    def test_malformed_json_raises_and_decoding_resumes(self):
        decoder = FrameDecoder()
        decoder.feed(b'data: {not json}\n\ndata: {"type": "chunk", "text": "ok"}\n\n')

        with pytest.raises(FrameParseError):
            decoder.next_event()
        assert decoder.next_event() == ChunkEvent(text="ok")

    def test_unknown_event_type_raises(self):
        decoder = FrameDecoder()
        decoder.feed(b'data: {"type": "thinking", "text": "..."}\n\n')
        with pytest.raises(FrameParseError):
            decoder.next_event()

    def test_invalid_utf8_raises(self):
        decoder = FrameDecoder()
        decoder.feed(b"data: \xff\xfe\n\n")
        with pytest.raises(FrameParseError):
            decoder.next_event()


class TestParseFrame:
    def test_ignores_id_and_retry_fields(self):
        frame = 'id: 7\nretry: 1000\ndata: {"type": "chunk", "text": "a"}'
        assert parse_frame(frame) == ChunkEvent(text="a")

    def test_non_object_payload_raises(self):
        with pytest.raises(FrameParseError):
            parse_frame("data: [1, 2]")
