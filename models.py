"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SessionState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    EDITING = "EDITING"


class TranscriptKind(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"
    ERROR = "error"


@dataclass(frozen=True)
class TranscriptEvent:
    kind: str
    text: str = ""
    message: str = ""


@dataclass
class SessionHandle:
    """One lifetime of the recognition helper process."""

    session_id: int
    process: Any
    pid: int
    model_path: str
    sample_rate: int = 16000
    device: Optional[str] = None
    last_error: str = ""
    stop_requested: bool = False
    returncode: Optional[int] = None
    exit_reported: bool = False


@dataclass(frozen=True)
class DraftSnapshot:
    state: SessionState
    draft: str
    partial: str
    status: str
    preview: str


@dataclass(frozen=True)
class PromptRecord:
    id: int
    created_at: str
    text: str


@dataclass(frozen=True)
class RunRecord:
    id: int
    prompt_id: int
    command: str
    window_name: Optional[str]
    created_at: str


@dataclass(frozen=True)
class LaunchResult:
    window_name: str
    command: str


@dataclass
class PasteResult:
    success: bool
    reason: str
    clipboard_restored: bool


@dataclass
class HandoffResult:
    success: bool
    message: str
    prompt: Optional[PromptRecord] = None
    run: Optional[RunRecord] = None
