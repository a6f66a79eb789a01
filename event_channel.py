"""Decode newline-delimited JSON events emitted by the STT helper.

Each line is one of::

    {"type": "partial", "text": "..."}
    {"type": "final", "text": "..."}
    {"type": "error", "error": "..."}

Anything else (log noise, truncated JSON, empty text) decodes to ``None``.
"""

from __future__ import annotations

import json
from typing import Optional, Union

from models import TranscriptEvent, TranscriptKind

_TEXT_KINDS = (TranscriptKind.PARTIAL.value, TranscriptKind.FINAL.value)


def decode_line(line: Union[str, bytes]) -> Optional[TranscriptEvent]:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None
    try:
        payload = json.loads(line)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    kind = payload.get("type")
    if kind in _TEXT_KINDS:
        text = _clean(payload.get("text"))
        if not text:
            return None
        return TranscriptEvent(kind=kind, text=text)
    if kind == TranscriptKind.ERROR.value:
        message = _clean(payload.get("error"))
        if not message:
            return None
        return TranscriptEvent(kind=kind, message=message)
    return None


def encode_event(event: TranscriptEvent) -> str:
    """Serialize an event into one protocol line (without newline)."""
    if event.kind == TranscriptKind.ERROR.value:
        payload = {"type": event.kind, "error": event.message}
    else:
        payload = {"type": event.kind, "text": event.text}
    return json.dumps(payload, ensure_ascii=False)


def _clean(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()
