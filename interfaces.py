"""Protocol interfaces used between the session core and its collaborators."""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence

from models import LaunchResult, PasteResult, PromptRecord, RunRecord, SessionHandle, TranscriptEvent


class TranscriptSource(Protocol):
    @property
    def active(self) -> bool: ...

    def bind(
        self,
        on_event: Optional[Callable[[SessionHandle, TranscriptEvent], None]] = None,
        on_exit: Optional[Callable[[SessionHandle], None]] = None,
        on_stream_error: Optional[Callable[[SessionHandle, BaseException], None]] = None,
    ) -> None: ...

    def start(self, model_path: str, sample_rate: int = 16000, device: Optional[str] = None) -> SessionHandle: ...

    def stop(self) -> None: ...


class PromptStore(Protocol):
    def save_prompt(self, text: str) -> PromptRecord: ...

    def update_prompt(self, prompt_id: int, text: str) -> PromptRecord: ...

    def get_last_prompt(self) -> Optional[PromptRecord]: ...

    def list_prompts(self, limit: int = 50) -> List[PromptRecord]: ...

    def log_run(self, prompt_id: int, command: str, window_name: Optional[str] = None) -> RunRecord: ...

    def get_last_run_for_prompt(self, prompt_id: int) -> Optional[RunRecord]: ...


class Launcher(Protocol):
    def launch(
        self,
        prompt: str,
        workdir: Optional[str] = None,
        extra_args: Sequence[str] = (),
        window_name: Optional[str] = None,
    ) -> LaunchResult: ...

    def list_windows(self) -> Optional[List[str]]: ...


class PasteService(Protocol):
    def copy_text(self, text: str) -> PasteResult: ...

    def paste_text(self, text: str) -> PasteResult: ...

