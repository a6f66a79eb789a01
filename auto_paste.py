"""Clipboard and keystroke services for handing text to other windows."""

from __future__ import annotations

import time

from errors import NO_ACTIVE_TARGET
from models import PasteResult

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

try:
    from pynput.keyboard import Controller, Key
except Exception:  # pragma: no cover
    Controller = None  # type: ignore
    Key = None  # type: ignore


class ClipboardPasteService:
    def __init__(self, restore_delay_s: float = 0.1, modifier: str = "ctrl") -> None:
        self._restore_delay_s = restore_delay_s
        self._modifier = modifier

    def copy_text(self, text: str) -> PasteResult:
        if not text.strip():
            return PasteResult(success=False, reason="Nothing to copy – prompt is empty.", clipboard_restored=True)
        if pyperclip is None:
            return PasteResult(success=False, reason="clipboard dependency missing", clipboard_restored=False)
        try:
            pyperclip.copy(text.strip())
        except Exception as exc:
            return PasteResult(success=False, reason=f"Clipboard copy failed: {exc}", clipboard_restored=False)
        return PasteResult(success=True, reason="Prompt copied to clipboard.", clipboard_restored=False)

    def paste_text(self, text: str) -> PasteResult:
        """Paste through the clipboard, then put the previous contents back."""
        if not text.strip():
            return PasteResult(success=False, reason="empty text", clipboard_restored=True)
        if pyperclip is None or Controller is None or Key is None:
            return PasteResult(
                success=False,
                reason="clipboard/keyboard dependency missing",
                clipboard_restored=False,
            )

        old_clip: str | None = None
        restored = False
        modifier = getattr(Key, self._modifier)
        try:
            old_clip = pyperclip.paste()
            pyperclip.copy(text)
            keyboard = Controller()
            with keyboard.pressed(modifier):
                keyboard.press("v")
                keyboard.release("v")
            time.sleep(self._restore_delay_s)
            pyperclip.copy(old_clip)
            return PasteResult(success=True, reason="ok", clipboard_restored=True)
        except Exception as exc:
            try:
                if old_clip is not None:
                    pyperclip.copy(old_clip)
                    restored = True
            except Exception:
                restored = False
            return PasteResult(
                success=False,
                reason=f"{NO_ACTIVE_TARGET}: {exc}",
                clipboard_restored=restored,
            )


class KeyboardInjector:
    """Type text into whichever window currently has keyboard focus."""

    def __init__(self, submit: bool = True) -> None:
        self._submit = submit

    def type_text(self, text: str) -> PasteResult:
        message = " ".join(text.split())
        if not message:
            return PasteResult(success=False, reason="empty text", clipboard_restored=True)
        if Controller is None or Key is None:
            return PasteResult(success=False, reason="keyboard dependency missing", clipboard_restored=True)
        try:
            keyboard = Controller()
            keyboard.type(message)
            if self._submit:
                keyboard.press(Key.enter)
                keyboard.release(Key.enter)
        except Exception as exc:
            return PasteResult(success=False, reason=f"{NO_ACTIVE_TARGET}: {exc}", clipboard_restored=True)
        return PasteResult(success=True, reason="ok", clipboard_restored=True)
