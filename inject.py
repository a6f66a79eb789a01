"""Headless mode: dictate straight into the focused window.

Partials are echoed on one console line; each final is typed (or pasted)
into whatever window has focus and submitted with Enter.
"""

from __future__ import annotations

import threading
from typing import Optional

from rich.console import Console

from auto_paste import KeyboardInjector
from config import AppSettings
from env import LOGGER
from errors import GluCodeError
from interfaces import PasteService, TranscriptSource
from models import SessionHandle, TranscriptEvent, TranscriptKind
from supervisor import SessionSupervisor


class HeadlessInjector:
    def __init__(
        self,
        session: TranscriptSource,
        injector: Optional[KeyboardInjector] = None,
        paste_service: Optional[PasteService] = None,
        console: Optional[Console] = None,
    ) -> None:
        self._session = session
        self._injector = injector or KeyboardInjector()
        self._paste_service = paste_service
        self._console = console or Console()
        self._done = threading.Event()
        self.diagnostic = ""
        self.injected: list[str] = []

        self._supervisor = SessionSupervisor(self._handle_abnormal_exit)
        session.bind(
            on_event=self._handle_event,
            on_exit=self._handle_exit,
            on_stream_error=self._supervisor.report_stream_error,
        )

    def run(self, settings: AppSettings) -> int:
        try:
            handle = self._session.start(settings.model_path, settings.sample_rate, settings.device)
        except GluCodeError as exc:
            self._console.print(f"[red]{exc.message}[/red]")
            return 1
        self._console.print(f"Listening (pid {handle.pid}); finals go to the focused window. Ctrl+C to stop.")
        try:
            self._done.wait()
        except KeyboardInterrupt:
            self._session.stop()
            self._console.print()
            return 0
        if self.diagnostic:
            self._console.print(f"[red]{self.diagnostic}[/red]")
            return 1
        return 0

    def _handle_event(self, handle: SessionHandle, event: TranscriptEvent) -> None:
        if event.kind == TranscriptKind.PARTIAL.value:
            self._console.print(f"partial: {event.text}", end="\r", highlight=False)
        elif event.kind == TranscriptKind.FINAL.value:
            self._console.print(f"\nfinal: {event.text}", highlight=False)
            self._inject(event.text)
        elif event.kind == TranscriptKind.ERROR.value:
            self._console.print(f"[red]stt error: {event.message}[/red]")

    def _inject(self, text: str) -> None:
        if self._paste_service is not None:
            result = self._paste_service.paste_text(text)
        else:
            result = self._injector.type_text(text)
        if result.success:
            self.injected.append(text)
        else:
            LOGGER.warning("inject failed: %s", result.reason)
            self._console.print(f"[red]inject failed: {result.reason}[/red]")

    def _handle_exit(self, handle: SessionHandle) -> None:
        self._supervisor.report_exit(handle)
        self._done.set()

    def _handle_abnormal_exit(self, handle: SessionHandle, diagnostic: str) -> None:
        self.diagnostic = diagnostic
