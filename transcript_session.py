"""Recognition helper process ownership.

``TranscriptSession`` spawns the STT helper, decodes its stdout through
``event_channel`` and forwards each event, with the handle of the session
that produced it, to a registered callback. Helper stderr lines are
forwarded as error events so warnings reach the status line. Three
daemon threads run per session: a stdout reader, a stderr reader and an
exit waiter. The waiter joins both readers before reporting the exit, so
every event the helper flushed is delivered before its exit is.
"""

from __future__ import annotations

import signal
import subprocess
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from env import LOGGER
from errors import MODEL_NOT_FOUND, ConfigurationError, HelperLaunchError, SessionActiveError
from event_channel import decode_line
from models import SessionHandle, TranscriptEvent, TranscriptKind

DEFAULT_SAMPLE_RATE = 16000

EventCallback = Callable[[SessionHandle, TranscriptEvent], None]
ExitCallback = Callable[[SessionHandle], None]
StreamErrorCallback = Callable[[SessionHandle, BaseException], None]


def default_helper_command() -> List[str]:
    return [sys.executable, str(Path(__file__).with_name("stt_helper.py"))]


class TranscriptSession:
    def __init__(
        self,
        helper_command: Optional[Sequence[str]] = None,
        on_event: Optional[EventCallback] = None,
        on_exit: Optional[ExitCallback] = None,
        on_stream_error: Optional[StreamErrorCallback] = None,
    ) -> None:
        self._helper_command = list(helper_command or default_helper_command())
        self._on_event = on_event
        self._on_exit = on_exit
        self._on_stream_error = on_stream_error
        self._lock = threading.Lock()
        self._handle: Optional[SessionHandle] = None
        self._session_id = 0

    def bind(
        self,
        on_event: Optional[EventCallback] = None,
        on_exit: Optional[ExitCallback] = None,
        on_stream_error: Optional[StreamErrorCallback] = None,
    ) -> None:
        self._on_event = on_event
        self._on_exit = on_exit
        self._on_stream_error = on_stream_error

    @property
    def handle(self) -> Optional[SessionHandle]:
        return self._handle

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(
        self,
        model_path: str,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        device: Optional[str] = None,
    ) -> SessionHandle:
        with self._lock:
            if self._handle is not None:
                raise SessionActiveError("stop the active session before starting a new one")
            path = Path(model_path).expanduser()
            if not path.exists():
                raise ConfigurationError(MODEL_NOT_FOUND, f"Model path not found: {path}")

            args = self.build_args(str(path), sample_rate, device)
            LOGGER.info("starting stt helper: %s", " ".join(args))
            try:
                process = subprocess.Popen(
                    args,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    encoding="utf-8",
                    errors="replace",
                    bufsize=1,
                    start_new_session=True,
                )
            except OSError as exc:
                raise HelperLaunchError(f"Failed to start STT helper: {exc}") from exc

            self._session_id += 1
            handle = SessionHandle(
                session_id=self._session_id,
                process=process,
                pid=process.pid,
                model_path=str(path),
                sample_rate=sample_rate,
                device=device,
            )
            self._handle = handle

        readers = [
            threading.Thread(target=self._read_stdout, args=(handle,), daemon=True),
            threading.Thread(target=self._read_stderr, args=(handle,), daemon=True),
        ]
        for reader in readers:
            reader.start()
        threading.Thread(target=self._wait_for_exit, args=(handle, readers), daemon=True).start()
        return handle

    def stop(self) -> None:
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            self._handle = None
            handle.stop_requested = True

        LOGGER.info("stopping session %s (pid %s)", handle.session_id, handle.pid)
        try:
            handle.process.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            LOGGER.debug("session %s already exited", handle.session_id)

    def feed_result(self, event: TranscriptEvent, handle: Optional[SessionHandle] = None) -> None:
        """Log ``event`` and hand it on together with the session that produced it."""
        handle = handle or self._handle
        if event.kind == TranscriptKind.ERROR.value:
            LOGGER.warning("stt error event: %s", event.message)
        else:
            LOGGER.debug("stt %s: %s", event.kind, event.text)
        if self._on_event:
            self._on_event(handle, event)

    def build_args(self, model_path: str, sample_rate: int, device: Optional[str]) -> List[str]:
        args = self._helper_command + ["--model", model_path, "--sample-rate", str(sample_rate)]
        if device:
            args += ["--device", str(device)]
        return args

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_current(self, handle: SessionHandle) -> bool:
        return self._handle is handle

    def _read_stdout(self, handle: SessionHandle) -> None:
        try:
            for line in handle.process.stdout:
                event = decode_line(line)
                if event is None:
                    continue
                if event.kind == TranscriptKind.ERROR.value:
                    handle.last_error = event.message
                if not self._is_current(handle):
                    LOGGER.debug("dropping %s from retired session %s", event.kind, handle.session_id)
                    continue
                self.feed_result(event, handle)
        except (OSError, ValueError) as exc:
            LOGGER.warning("session %s stdout failed: %s", handle.session_id, exc)
            if self._on_stream_error:
                self._on_stream_error(handle, exc)

    def _read_stderr(self, handle: SessionHandle) -> None:
        try:
            for line in handle.process.stderr:
                message = line.strip()
                if not message:
                    continue
                handle.last_error = message
                if not self._is_current(handle):
                    LOGGER.info("stt helper[%s] after stop: %s", handle.pid, message)
                    continue
                self.feed_result(TranscriptEvent(kind=TranscriptKind.ERROR.value, message=message), handle)
        except (OSError, ValueError) as exc:
            LOGGER.debug("session %s stderr closed: %s", handle.session_id, exc)

    def _wait_for_exit(self, handle: SessionHandle, readers: List[threading.Thread]) -> None:
        returncode = handle.process.wait()
        for reader in readers:
            reader.join()
        handle.returncode = returncode
        with self._lock:
            if self._handle is handle:
                self._handle = None
        LOGGER.debug("session %s exited with %s", handle.session_id, returncode)
        if self._on_exit:
            self._on_exit(handle)
