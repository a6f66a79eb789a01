"""Turn helper exits and stream failures into at most one forced stop."""

from __future__ import annotations

import signal
import threading
from typing import Callable, Optional

from env import LOGGER
from models import SessionHandle

AbnormalExitCallback = Callable[[SessionHandle, str], None]


def describe_returncode(returncode: Optional[int]) -> str:
    if returncode is None:
        return "helper exited"
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal {name}"
    return f"exit code {returncode}"


def build_diagnostic(last_error: str, reason: str) -> str:
    detail = "; ".join(part for part in (last_error.strip(), reason) if part)
    return f"Recording stopped ({detail or 'helper exited'})."


class SessionSupervisor:
    def __init__(self, on_abnormal_exit: Optional[AbnormalExitCallback] = None) -> None:
        self._on_abnormal_exit = on_abnormal_exit
        self._lock = threading.Lock()

    def bind(self, on_abnormal_exit: AbnormalExitCallback) -> None:
        self._on_abnormal_exit = on_abnormal_exit

    def report_exit(self, handle: SessionHandle) -> None:
        reason = describe_returncode(handle.returncode)
        if not self._claim(handle):
            LOGGER.debug("session %s exit already reported (%s)", handle.session_id, reason)
            return
        if handle.stop_requested:
            LOGGER.info("session %s stopped (%s)", handle.session_id, reason)
            return
        self._escalate(handle, reason)

    def report_stream_error(self, handle: SessionHandle, exc: BaseException) -> None:
        reason = f"stream error: {exc}"
        if not self._claim(handle):
            return
        if handle.stop_requested:
            LOGGER.debug("session %s %s after stop", handle.session_id, reason)
            return
        self._escalate(handle, reason)

    def _claim(self, handle: SessionHandle) -> bool:
        with self._lock:
            if handle.exit_reported:
                return False
            handle.exit_reported = True
            return True

    def _escalate(self, handle: SessionHandle, reason: str) -> None:
        diagnostic = build_diagnostic(handle.last_error, reason)
        LOGGER.warning("session %s terminated unexpectedly: %s", handle.session_id, diagnostic)
        if self._on_abnormal_exit:
            self._on_abnormal_exit(handle, diagnostic)
