from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from textual.widgets import OptionList, TextArea

from config import AppSettings
from models import LaunchResult, PasteResult, SessionHandle, SessionState, TranscriptEvent, TranscriptKind
from prompt_store import PromptStore
from tui import GluCodeApp


class FakeSession:
    def __init__(self) -> None:
        self.handle: Optional[SessionHandle] = None
        self.count = 0

    @property
    def active(self) -> bool:
        return self.handle is not None

    def bind(self, on_event=None, on_exit=None, on_stream_error=None) -> None:  # noqa: ANN001
        self.on_event = on_event
        self.on_exit = on_exit

    def start(self, model_path: str, sample_rate: int = 16000, device: Optional[str] = None) -> SessionHandle:
        self.count += 1
        self.handle = SessionHandle(session_id=self.count, process=None, pid=10, model_path=model_path)
        return self.handle

    def stop(self) -> None:
        if self.handle is not None:
            self.handle.stop_requested = True
        self.handle = None

    def emit(self, kind: str, text: str) -> None:
        self.on_event(self.handle, TranscriptEvent(kind=kind, text=text))


class FakeLauncher:
    def __init__(self) -> None:
        self.prompts: list[str] = []

    def launch(self, prompt, workdir=None, extra_args=(), window_name=None) -> LaunchResult:  # noqa: ANN001
        self.prompts.append(prompt)
        return LaunchResult(window_name=window_name or "codex-x", command=f"codex '{prompt}'")

    def list_windows(self) -> Optional[list[str]]:
        return None


class FakeClipboard:
    def __init__(self) -> None:
        self.copied: list[str] = []

    def copy_text(self, text: str) -> PasteResult:
        self.copied.append(text)
        return PasteResult(success=True, reason="Prompt copied to clipboard.", clipboard_restored=False)


def _app(tmp_path: Path, session: FakeSession, launcher: FakeLauncher, clipboard: FakeClipboard):  # noqa: ANN202
    store = PromptStore(tmp_path / "prompts.db")
    settings = AppSettings(model_path=str(tmp_path / "vosk-model-small"))
    return GluCodeApp(settings, store, session=session, launcher=launcher, clipboard=clipboard), store


def test_record_save_and_launch(tmp_path: Path) -> None:
    session, launcher, clipboard = FakeSession(), FakeLauncher(), FakeClipboard()
    app, store = _app(tmp_path, session, launcher, clipboard)

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("r")
            assert app._machine.state == SessionState.RECORDING

            session.emit(TranscriptKind.PARTIAL.value, "add")
            await pilot.pause()
            assert app.query_one("#prompt", TextArea).text == "add …"

            session.emit(TranscriptKind.FINAL.value, "add a readme")
            await pilot.press("r")
            assert app._machine.state == SessionState.IDLE
            assert app.query_one("#prompt", TextArea).text == "add a readme"

            await pilot.press("s")
            assert store.get_last_prompt().text == "add a readme"
            assert app.query_one("#history", OptionList).option_count == 1

            await pilot.press("c")
            assert launcher.prompts == ["add a readme"]
            assert app._machine.status.startswith("Codex launched")

            await pilot.press("y")
            assert clipboard.copied == ["add a readme"]

            await pilot.press("q")

    try:
        asyncio.run(scenario())
    finally:
        store.close()


def test_edit_mode_commits_typed_text(tmp_path: Path) -> None:
    session = FakeSession()
    app, store = _app(tmp_path, session, FakeLauncher(), FakeClipboard())

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("r")
            session.emit(TranscriptKind.FINAL.value, "hello")
            await pilot.press("ctrl+e")
            assert app._machine.state == SessionState.EDITING
            assert session.active is False

            await pilot.press("end", "space", "w", "o", "r", "l", "d")
            await pilot.press("escape")

            assert app._machine.state == SessionState.IDLE
            assert app._machine.draft == "hello world"

    try:
        asyncio.run(scenario())
    finally:
        store.close()


def test_history_selection_loads_prompt(tmp_path: Path) -> None:
    session = FakeSession()
    app, store = _app(tmp_path, session, FakeLauncher(), FakeClipboard())
    record = store.save_prompt("from history")

    async def scenario() -> None:
        async with app.run_test() as pilot:
            history = app.query_one("#history", OptionList)
            history.focus()
            history.highlighted = 0
            await pilot.press("enter")
            await pilot.pause()

            assert app._machine.draft == "from history"
            assert app._machine.status == f"Loaded prompt #{record.id}."
            assert app._handoff.active_prompt_id == record.id

    try:
        asyncio.run(scenario())
    finally:
        store.close()
