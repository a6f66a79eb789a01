from __future__ import annotations

import pytest

from event_channel import decode_line, encode_event
from models import TranscriptEvent, TranscriptKind


def test_decodes_partial_final_and_error() -> None:
    assert decode_line('{"type":"partial","text":"hello"}') == TranscriptEvent(
        kind=TranscriptKind.PARTIAL.value, text="hello"
    )
    assert decode_line('{"type":"final","text":" hello world "}\n') == TranscriptEvent(
        kind=TranscriptKind.FINAL.value, text="hello world"
    )
    assert decode_line('{"type":"error","error":"mic busy"}') == TranscriptEvent(
        kind=TranscriptKind.ERROR.value, message="mic busy"
    )


def test_decodes_bytes() -> None:
    event = decode_line(b'{"type":"final","text":"caf\xc3\xa9"}')
    assert event is not None
    assert event.text == "café"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "LOG (VoskAPI:ReadDataFiles():model.cc:213) Decoding params",
        '{"type":"final","text":"trunc',
        "[1, 2, 3]",
        '"final"',
        '{"type":"partial","text":""}',
        '{"type":"final","text":"   "}',
        '{"type":"final"}',
        '{"type":"final","text":42}',
        '{"type":"error"}',
        '{"type":"error","error":""}',
        '{"type":"error","text":"wrong field"}',
        '{"type":"result","text":"unknown kind"}',
        '{"text":"no type"}',
        b"\xff\xfe garbage",
    ],
)
def test_malformed_lines_yield_nothing(line: object) -> None:
    assert decode_line(line) is None  # type: ignore[arg-type]


def test_encode_event_matches_protocol() -> None:
    assert encode_event(TranscriptEvent(kind="final", text="hi")) == '{"type": "final", "text": "hi"}'
    assert encode_event(TranscriptEvent(kind="error", message="boom")) == '{"type": "error", "error": "boom"}'
    line = encode_event(TranscriptEvent(kind="partial", text="héllo"))
    assert decode_line(line) == TranscriptEvent(kind="partial", text="héllo")
