"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
SESSION_ACTIVE = "SESSION_ACTIVE"
HELPER_LAUNCH_FAILED = "HELPER_LAUNCH_FAILED"
HELPER_EXITED = "HELPER_EXITED"
STT_ERROR = "STT_ERROR"
EMPTY_PROMPT = "EMPTY_PROMPT"
TMUX_MISSING = "TMUX_MISSING"
LAUNCH_FAILED = "LAUNCH_FAILED"
PROMPT_NOT_FOUND = "PROMPT_NOT_FOUND"
NO_ACTIVE_TARGET = "NO_ACTIVE_TARGET"

ERROR_MESSAGES = {
    MODEL_NOT_FOUND: "Speech model directory not found.",
    SESSION_ACTIVE: "A recording session is already running.",
    HELPER_LAUNCH_FAILED: "Failed to start STT helper.",
    HELPER_EXITED: "STT helper exited unexpectedly.",
    STT_ERROR: "Speech recognition reported an error.",
    EMPTY_PROMPT: "Prompt is empty.",
    TMUX_MISSING: "tmux executable not found in PATH. Please install tmux.",
    LAUNCH_FAILED: "Failed to launch Codex.",
    PROMPT_NOT_FOUND: "Prompt not found.",
    NO_ACTIVE_TARGET: "No active input target.",
}


class GluCodeError(Exception):
    """Base error carrying one of the codes above."""

    def __init__(self, code: str, message: str = "") -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        super().__init__(self.message)


class ConfigurationError(GluCodeError):
    pass


class SessionActiveError(GluCodeError):
    def __init__(self, message: str = "") -> None:
        super().__init__(SESSION_ACTIVE, message)


class HelperLaunchError(GluCodeError):
    def __init__(self, message: str = "") -> None:
        super().__init__(HELPER_LAUNCH_FAILED, message)


class LaunchError(GluCodeError):
    pass


class PromptNotFoundError(GluCodeError):
    def __init__(self, prompt_id: int) -> None:
        self.prompt_id = prompt_id
        super().__init__(PROMPT_NOT_FOUND, f"Prompt with id {prompt_id} not found")
