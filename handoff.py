"""Save and launch the current draft.

Storage and launch failures come back as ``HandoffResult`` messages so
the caller can show them and retry. Neither touches the draft or the
recording state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from env import LOGGER
from errors import GluCodeError
from interfaces import Launcher, PromptStore
from launcher import default_window_name
from models import HandoffResult, PromptRecord, RunRecord


def format_run(run: RunRecord) -> str:
    try:
        when = datetime.fromisoformat(run.created_at.replace("Z", "+00:00")).astimezone()
        stamp = when.strftime("%H:%M:%S")
    except ValueError:
        stamp = run.created_at
    window = f" tmux:{run.window_name}" if run.window_name else ""
    return f"{stamp}{window}"


class HandoffService:
    def __init__(
        self,
        store: PromptStore,
        launcher: Launcher,
        workdir: Optional[str] = None,
        codex_args: Sequence[str] = (),
    ) -> None:
        self._store = store
        self._launcher = launcher
        self._workdir = workdir
        self._codex_args = tuple(codex_args)
        self.active_prompt_id: Optional[int] = None
        self.created_at: Optional[str] = None
        self.last_run: Optional[RunRecord] = None

    def reset(self) -> None:
        self.active_prompt_id = None
        self.created_at = None
        self.last_run = None

    def select(self, record: PromptRecord) -> None:
        self.active_prompt_id = record.id
        self.created_at = record.created_at
        self.last_run = self._store.get_last_run_for_prompt(record.id)

    def save(self, text: str) -> HandoffResult:
        content = text.strip()
        if not content:
            return HandoffResult(success=False, message="Nothing to save – prompt is empty.")
        try:
            if self.active_prompt_id:
                record = self._store.update_prompt(self.active_prompt_id, content)
            else:
                record = self._store.save_prompt(content)
        except GluCodeError as exc:
            LOGGER.warning("save failed: %s", exc.message)
            return HandoffResult(success=False, message=f"Save failed: {exc.message}")

        self.active_prompt_id = record.id
        self.created_at = record.created_at
        return HandoffResult(
            success=True,
            message=f"Saved prompt #{record.id} ({record.created_at}).",
            prompt=record,
        )

    def launch(self, text: str) -> HandoffResult:
        prompt = text.strip()
        if not prompt:
            return HandoffResult(success=False, message="Cannot launch Codex – prompt is empty.")

        record: Optional[PromptRecord] = None
        if not self.active_prompt_id:
            saved = self.save(prompt)
            if not saved.success:
                return saved
            record = saved.prompt

        try:
            result = self._launcher.launch(
                prompt,
                workdir=self._workdir,
                extra_args=self._codex_args,
                window_name=default_window_name(self.active_prompt_id),
            )
        except GluCodeError as exc:
            LOGGER.warning("launch failed: %s", exc.message)
            return HandoffResult(success=False, message=f"Failed to launch Codex: {exc.message}", prompt=record)

        if self.active_prompt_id:
            self.last_run = self._store.log_run(self.active_prompt_id, result.command, result.window_name)
        return HandoffResult(
            success=True,
            message=f'Codex launched in tmux window "{result.window_name}".',
            prompt=record,
            run=self.last_run,
        )
