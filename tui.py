"""Textual TUI: dictate, review, edit, save and hand a prompt to Codex.

The state machine calls ``_handle_change`` from reader threads as well
as from the UI thread. It only posts a ``DraftChanged`` message, which
Textual accepts from any thread without blocking, and the UI re-reads the
snapshot when the message is handled.
"""

from __future__ import annotations

import os
from typing import Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Footer, Header, OptionList, Static, TextArea
from textual.widgets.option_list import Option

from auto_paste import ClipboardPasteService
from config import AppSettings
from handoff import HandoffService, format_run
from interfaces import Launcher, PasteService, TranscriptSource
from launcher import TmuxLauncher
from models import DraftSnapshot, PromptRecord, SessionState
from prompt_store import PromptStore
from state_machine import RecordingStateMachine
from transcript_session import TranscriptSession

MODE_LABELS = {
    SessionState.IDLE: ("Idle", "VIEW"),
    SessionState.RECORDING: ("Recording", "RECORD"),
    SessionState.EDITING: ("Editing", "EDIT"),
}


class DraftChanged(Message):
    """The draft, partial, status or state changed."""


class GluCodeApp(App):
    TITLE = "GLU CODE: Voice -> Code"
    AUTO_FOCUS = None

    CSS = """
    #main {
        width: 1fr;
        padding: 0 1;
    }
    #prompt {
        height: 1fr;
        border: solid $primary;
    }
    #mode-line {
        height: 1;
        color: $text-muted;
    }
    #status {
        height: 1;
    }
    #history-panel {
        width: 40;
        border: solid $secondary;
    }
    #history {
        height: 1fr;
    }
    #tmux-status {
        height: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("r", "toggle_recording", "Record/Stop"),
        Binding("ctrl+e", "edit", "Edit", priority=True),
        Binding("escape", "exit_edit", "Leave edit", priority=True),
        Binding("ctrl+s", "save_and_exit", "Save", priority=True),
        Binding("s", "save", "Save", show=False),
        Binding("h", "toggle_history", "History"),
        Binding("c", "launch", "Codex"),
        Binding("y", "copy", "Copy"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(
        self,
        settings: AppSettings,
        store: PromptStore,
        session: Optional[TranscriptSource] = None,
        launcher: Optional[Launcher] = None,
        clipboard: Optional[PasteService] = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._store = store
        self._launcher = launcher or TmuxLauncher()
        self._clipboard = clipboard or ClipboardPasteService()
        self._handoff = HandoffService(
            store,
            self._launcher,
            workdir=os.getcwd(),
            codex_args=settings.codex_args,
        )
        self._machine = RecordingStateMachine(
            session or TranscriptSession(),
            model_path=settings.model_path,
            sample_rate=settings.sample_rate,
            device=settings.device,
            on_change=self._handle_change,
        )
        self._history_open = True

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="main"):
                yield TextArea("", id="prompt", read_only=True)
                yield Static("", id="mode-line")
                yield Static("", id="status")
            with Vertical(id="history-panel"):
                yield OptionList(id="history")
                yield Static("", id="tmux-status")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#history-panel").border_title = "History (h)"
        prompt = self.query_one("#prompt", TextArea)
        prompt.can_focus = False
        self._refresh_history()
        self._refresh_view(self._machine.snapshot())

    # ------------------------------------------------------------------
    # State machine hook (any thread)
    # ------------------------------------------------------------------

    def _handle_change(self, snapshot: DraftSnapshot) -> None:
        self.post_message(DraftChanged())

    def on_draft_changed(self, message: DraftChanged) -> None:
        self._refresh_view(self._machine.snapshot())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh_view(self, snapshot: DraftSnapshot) -> None:
        prompt = self.query_one("#prompt", TextArea)
        editing = snapshot.state == SessionState.EDITING
        if not editing and prompt.text != snapshot.preview:
            prompt.load_text(snapshot.preview)
        prompt.read_only = not editing
        prompt.border_title = f"Current prompt ({MODE_LABELS[snapshot.state][1]})"
        self.query_one("#mode-line", Static).update(Text(self._mode_line(snapshot)))
        self.query_one("#status", Static).update(Text(snapshot.status))

    def _mode_line(self, snapshot: DraftSnapshot) -> str:
        mode = MODE_LABELS[snapshot.state][0]
        partial = " …partial" if snapshot.partial else ""
        prompt_id = self._handoff.active_prompt_id
        id_label = f"#{prompt_id}" if prompt_id else "unsaved"
        model = os.path.basename(self._settings.model_path.rstrip(os.sep))
        run = f" | Last run: {format_run(self._handoff.last_run)}" if self._handoff.last_run else ""
        return f"Mode: {mode}{partial} | Prompt: {id_label} | Model: {model}{run}"

    def _refresh_history(self, selected_id: Optional[int] = None) -> None:
        history = self.query_one("#history", OptionList)
        prompts = self._store.list_prompts(100)
        history.clear_options()
        options = []
        for record in prompts:
            preview = " ".join(record.text[:60].split())
            last_run = self._store.get_last_run_for_prompt(record.id)
            if last_run:
                preview = f"{preview} (last run {format_run(last_run)})"
            options.append(Option(f"#{record.id} {preview}", id=str(record.id)))
        history.add_options(options)
        if selected_id is not None:
            for index, record in enumerate(prompts):
                if record.id == selected_id:
                    history.highlighted = index
                    break
        self._refresh_tmux_status()

    def _refresh_tmux_status(self) -> None:
        windows = self._launcher.list_windows()
        if windows is None:
            text = "tmux: not running"
        elif windows:
            text = "tmux windows: " + " | ".join(windows)
        else:
            text = "tmux: no windows"
        self.query_one("#tmux-status", Static).update(Text(text))

    # ------------------------------------------------------------------
    # Widget events
    # ------------------------------------------------------------------

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self._machine.state == SessionState.EDITING:
            self._machine.apply_edit(event.text_area.text)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id is None:
            return
        record = self._store.get_prompt(int(event.option.id))
        if record is None:
            return
        self._load_record(record)

    def _load_record(self, record: PromptRecord) -> None:
        self._handoff.select(record)
        self._machine.load_draft(record.text, status=f"Loaded prompt #{record.id}.")
        self.set_focus(None)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_toggle_recording(self) -> None:
        if self._machine.state == SessionState.RECORDING:
            self._machine.stop_recording()
            return
        if self._machine.start_recording():
            self._handoff.reset()

    def action_edit(self) -> None:
        self._machine.begin_editing()
        prompt = self.query_one("#prompt", TextArea)
        prompt.load_text(self._machine.draft)
        prompt.read_only = False
        prompt.can_focus = True
        prompt.focus()

    def action_exit_edit(self) -> None:
        prompt = self.query_one("#prompt", TextArea)
        if self._machine.state == SessionState.EDITING:
            self._machine.finish_editing(prompt.text)
        prompt.can_focus = False
        self.set_focus(None)

    def action_save(self) -> None:
        result = self._handoff.save(self._machine.draft)
        self._machine.set_status(result.message)
        if result.success:
            self._refresh_history(self._handoff.active_prompt_id)

    def action_save_and_exit(self) -> None:
        if self._machine.state == SessionState.EDITING:
            self.action_exit_edit()
        self.action_save()

    def action_launch(self) -> None:
        result = self._handoff.launch(self._machine.draft)
        self._machine.set_status(result.message)
        self._refresh_history(self._handoff.active_prompt_id)

    def action_copy(self) -> None:
        result = self._clipboard.copy_text(self._machine.draft)
        self._machine.set_status(result.reason)

    def action_toggle_history(self) -> None:
        self._history_open = not self._history_open
        panel = self.query_one("#history-panel")
        panel.display = self._history_open
        history = self.query_one("#history", OptionList)
        if self._history_open:
            self._refresh_history(self._handoff.active_prompt_id)
            history.focus()
        else:
            self.set_focus(None)

    def action_quit_app(self) -> None:
        self._machine.stop_recording()
        self.exit()
