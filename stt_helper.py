"""STT helper process: microphone -> Vosk -> JSON lines on stdout.

Run by ``TranscriptSession``; see ``event_channel`` for the line format.
Free-text diagnostics go to stderr. SIGINT/SIGTERM flush a final event and
exit 0. A missing model, engine or audio device exits 1.
"""

from __future__ import annotations

import argparse
import json
import os
import signal
import sys
import threading
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, List, Optional, Union

from event_channel import encode_event
from models import TranscriptEvent, TranscriptKind

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

try:
    import vosk
except Exception:  # pragma: no cover
    vosk = None  # type: ignore

DEFAULT_SAMPLE_RATE = 16000


def default_model_path() -> str:
    return os.environ.get("VOSK_MODEL_PATH") or str(Path.home() / ".local" / "share" / "vosk" / "model")


def parse_device(value: Optional[str]) -> Union[int, str, None]:
    """sounddevice accepts an index or a (sub)string of the device name."""
    if not value:
        return None
    return int(value) if value.isdigit() else value


def extract_text(result: Any, key: str) -> str:
    """Pull ``key`` out of a Vosk result, which is usually a JSON string."""
    if isinstance(result, (str, bytes)):
        try:
            result = json.loads(result)
        except ValueError:
            return ""
    if not isinstance(result, dict):
        return ""
    value = result.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def emit(event: TranscriptEvent) -> None:
    sys.stdout.write(encode_event(event) + "\n")
    sys.stdout.flush()


def emit_error(message: str) -> None:
    sys.stderr.write(message + "\n")
    sys.stderr.flush()
    emit(TranscriptEvent(kind=TranscriptKind.ERROR.value, message=message))


class VoskTranscriber:
    def __init__(self, recognizer: Any) -> None:
        self._recognizer = recognizer

    @classmethod
    def load(cls, model_path: str, sample_rate: int) -> "VoskTranscriber":
        if vosk is None:
            raise RuntimeError("Failed to load vosk: package is not installed")
        vosk.SetLogLevel(-1)
        model = vosk.Model(model_path)
        return cls(vosk.KaldiRecognizer(model, sample_rate))

    def accept(self, pcm16: bytes) -> Optional[TranscriptEvent]:
        if self._recognizer.AcceptWaveform(pcm16):
            text = extract_text(self._recognizer.Result(), "text")
            if text:
                return TranscriptEvent(kind=TranscriptKind.FINAL.value, text=text)
            return None
        partial = extract_text(self._recognizer.PartialResult(), "partial")
        if partial:
            return TranscriptEvent(kind=TranscriptKind.PARTIAL.value, text=partial)
        return None

    def finish(self) -> Optional[TranscriptEvent]:
        text = extract_text(self._recognizer.FinalResult(), "text")
        if text:
            return TranscriptEvent(kind=TranscriptKind.FINAL.value, text=text)
        return None


class MicrophoneStream:
    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        device: Union[int, str, None] = None,
        chunk_ms: int = 250,
    ) -> None:
        self.sample_rate = sample_rate
        self.device = device
        self.chunk_ms = chunk_ms
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self.dropped_chunks = 0
        self._queue: Optional[Queue[bytes]] = None

    def start(self, queue: Queue[bytes]) -> None:
        with self._lock:
            if self._running:
                return
            if sd is None or np is None:
                raise RuntimeError("sounddevice and numpy are required for audio capture")
            self._queue = queue
            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            self._stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="int16",
                blocksize=blocksize,
                device=self.device,
                callback=self._on_audio,
            )
            self._stream.start()
            self._running = True

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._stream is not None:
                self._stream.stop()
                self._stream.close()
                self._stream = None

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            sys.stderr.write(f"audio status: {status}\n")
        if not self._running or self._queue is None:
            return
        try:
            self._queue.put_nowait(np.asarray(indata, dtype=np.int16).tobytes())
        except Full:
            self.dropped_chunks += 1


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Microphone to Vosk JSON-lines helper")
    parser.add_argument("--model", default=None, help="Vosk model directory")
    parser.add_argument("--sample-rate", type=int, default=DEFAULT_SAMPLE_RATE, help="Capture sample rate")
    parser.add_argument("--device", default=None, help="Input device index or name")
    return parser


def run(transcriber: VoskTranscriber, microphone: MicrophoneStream, stop_event: threading.Event) -> None:
    """Feed captured audio to the recognizer until ``stop_event`` is set."""
    queue: Queue[bytes] = Queue(maxsize=100)
    microphone.start(queue)
    try:
        while not stop_event.is_set():
            try:
                chunk = queue.get(timeout=0.2)
            except Empty:
                continue
            event = transcriber.accept(chunk)
            if event is not None:
                emit(event)
    finally:
        microphone.stop()

    while True:
        try:
            chunk = queue.get_nowait()
        except Empty:
            break
        event = transcriber.accept(chunk)
        if event is not None and event.kind == TranscriptKind.FINAL.value:
            emit(event)

    final = transcriber.finish()
    if final is not None:
        emit(final)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    model_path = args.model or default_model_path()
    if not Path(model_path).exists():
        emit_error(f"Model path not found: {model_path}")
        return 1

    try:
        transcriber = VoskTranscriber.load(model_path, args.sample_rate)
    except Exception as exc:
        emit_error(f"failed to load model: {exc}")
        return 1

    stop_event = threading.Event()

    def _shutdown(signum: int, frame: Any) -> None:
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    microphone = MicrophoneStream(sample_rate=args.sample_rate, device=parse_device(args.device))
    try:
        run(transcriber, microphone, stop_event)
    except Exception as exc:
        emit_error(f"recorder error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
