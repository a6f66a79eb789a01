"""State-machine based recording orchestration.

``RecordingStateMachine`` owns the draft and is the single arbiter of
whether helper output still matters. Reader threads, the supervisor and
the UI all enter through methods that hold ``self._lock``, and every
event re-checks the state before it touches the draft.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from env import LOGGER
from errors import GluCodeError
from interfaces import TranscriptSource
from models import DraftSnapshot, SessionHandle, SessionState, TranscriptEvent, TranscriptKind
from supervisor import SessionSupervisor

ChangeCallback = Callable[[DraftSnapshot], None]

PARTIAL_MARKER = " …"


def join_final(draft: str, text: str) -> str:
    """Append committed text to the draft with single-space joining."""
    text = text.strip()
    existing = draft.strip()
    if not text:
        return existing
    return f"{existing} {text}" if existing else text


def render_preview(draft: str, partial: str, recording: bool) -> str:
    base = draft.strip()
    partial = partial.strip()
    if recording and partial:
        return " ".join(part for part in (base, partial) if part) + PARTIAL_MARKER
    return base


class RecordingStateMachine:
    def __init__(
        self,
        session: TranscriptSource,
        model_path: str,
        sample_rate: int = 16000,
        device: Optional[str] = None,
        supervisor: Optional[SessionSupervisor] = None,
        on_change: Optional[ChangeCallback] = None,
    ) -> None:
        self._session = session
        self._model_path = model_path
        self._sample_rate = sample_rate
        self._device = device
        self._supervisor = supervisor or SessionSupervisor()
        self._on_change = on_change

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._draft = ""
        self._partial = ""
        self._status = ""
        self._handle: Optional[SessionHandle] = None

        self._supervisor.bind(self._handle_abnormal_exit)
        self._session.bind(
            on_event=self._handle_transcript_event,
            on_exit=self._supervisor.report_exit,
            on_stream_error=self._supervisor.report_stream_error,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def partial(self) -> str:
        return self._partial

    @property
    def status(self) -> str:
        return self._status

    @property
    def model_path(self) -> str:
        return self._model_path

    @property
    def preview(self) -> str:
        with self._lock:
            return render_preview(self._draft, self._partial, self._state == SessionState.RECORDING)

    def snapshot(self) -> DraftSnapshot:
        with self._lock:
            return DraftSnapshot(
                state=self._state,
                draft=self._draft,
                partial=self._partial,
                status=self._status,
                preview=self.preview,
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_recording(self) -> bool:
        with self._lock:
            if self._state == SessionState.RECORDING:
                return False
            if self._session.active:
                self._session.stop()
            try:
                handle = self._session.start(self._model_path, self._sample_rate, self._device)
            except GluCodeError as exc:
                LOGGER.warning("recording not started: %s", exc.message)
                self._status = exc.message
                self._notify()
                return False

            self._handle = handle
            self._draft = ""
            self._partial = ""
            self._status = "Recording…"
            self._state = SessionState.RECORDING
            self._notify()
            return True

    def stop_recording(self) -> bool:
        with self._lock:
            if self._state != SessionState.RECORDING:
                return False
            self._session.stop()
            self._handle = None
            self._partial = ""
            self._status = "Recording stopped."
            self._state = SessionState.IDLE
            self._notify()
            return True

    def begin_editing(self) -> None:
        with self._lock:
            if self._state == SessionState.EDITING:
                return
            if self._state == SessionState.RECORDING:
                self.stop_recording()
            self._partial = ""
            self._state = SessionState.EDITING
            self._status = "Editing prompt."
            self._notify()

    def apply_edit(self, text: str) -> bool:
        with self._lock:
            if self._state != SessionState.EDITING:
                return False
            self._draft = text
            self._partial = ""
            self._notify()
            return True

    def finish_editing(self, text: Optional[str] = None) -> bool:
        with self._lock:
            if self._state != SessionState.EDITING:
                return False
            if text is not None:
                self._draft = text
            self._state = SessionState.IDLE
            self._status = ""
            self._notify()
            return True

    def load_draft(self, text: str, status: str = "") -> None:
        """Replace the draft with stored text, e.g. a history selection."""
        with self._lock:
            if self._state == SessionState.RECORDING:
                self.stop_recording()
            self._state = SessionState.IDLE
            self._draft = text
            self._partial = ""
            self._status = status
            self._notify()

    def set_status(self, status: str) -> None:
        with self._lock:
            self._status = status
            self._notify()

    # ------------------------------------------------------------------
    # Session callbacks (reader and waiter threads)
    # ------------------------------------------------------------------

    def _handle_transcript_event(self, handle: Optional[SessionHandle], event: TranscriptEvent) -> None:
        with self._lock:
            if self._state != SessionState.RECORDING or handle is not self._handle:
                LOGGER.debug("discarding %s event in %s", event.kind, self._state.value)
                return
            kind = event.kind
            if kind == TranscriptKind.PARTIAL.value:
                self._partial = event.text
            elif kind == TranscriptKind.FINAL.value:
                self._draft = join_final(self._draft, event.text)
                self._partial = ""
            elif kind == TranscriptKind.ERROR.value:
                self._status = f"STT error: {event.message}"
                self._partial = ""
            else:
                return
            self._notify()

    def _handle_abnormal_exit(self, handle: SessionHandle, diagnostic: str) -> None:
        with self._lock:
            if self._state != SessionState.RECORDING or handle is not self._handle:
                LOGGER.debug("ignoring exit of session %s in %s", handle.session_id, self._state.value)
                return
            self._session.stop()
            self._handle = None
            self._partial = ""
            self._status = diagnostic
            self._state = SessionState.IDLE
            self._notify()

    def _notify(self) -> None:
        if self._on_change:
            self._on_change(self.snapshot())
