from __future__ import annotations

from contextlib import contextmanager

import auto_paste
from auto_paste import ClipboardPasteService, KeyboardInjector
from errors import NO_ACTIVE_TARGET


class FakeClipboard:
    def __init__(self, content: str = "previous", fail_copy: bool = False) -> None:
        self.content = content
        self.fail_copy = fail_copy
        self.history: list[str] = []

    def copy(self, text: str) -> None:
        if self.fail_copy:
            raise RuntimeError("no clipboard mechanism")
        self.history.append(text)
        self.content = text

    def paste(self) -> str:
        return self.content


class FakeKey:
    ctrl = "<ctrl>"
    enter = "<enter>"


class FakeController:
    actions: list[tuple[str, str]] = []
    fail = False

    def __init__(self) -> None:
        if FakeController.fail:
            raise RuntimeError("no display")

    @contextmanager
    def pressed(self, key: str):  # noqa: ANN201
        self.actions.append(("down", key))
        yield
        self.actions.append(("up", key))

    def press(self, key: str) -> None:
        self.actions.append(("press", key))

    def release(self, key: str) -> None:
        self.actions.append(("release", key))

    def type(self, text: str) -> None:
        self.actions.append(("type", text))


def _install(monkeypatch, clipboard=None, fail_keyboard: bool = False) -> None:  # noqa: ANN001
    FakeController.actions = []
    FakeController.fail = fail_keyboard
    monkeypatch.setattr(auto_paste, "pyperclip", clipboard)
    monkeypatch.setattr(auto_paste, "Controller", FakeController)
    monkeypatch.setattr(auto_paste, "Key", FakeKey)


def test_paste_returns_failure_when_dependencies_missing(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(auto_paste, "pyperclip", None)
    monkeypatch.setattr(auto_paste, "Controller", None)
    monkeypatch.setattr(auto_paste, "Key", None)

    service = ClipboardPasteService()
    result = service.paste_text("hello")

    assert result.success is False
    assert result.clipboard_restored is False


def test_paste_returns_failure_on_empty_text() -> None:
    service = ClipboardPasteService()
    result = service.paste_text("   ")

    assert result.success is False
    assert result.clipboard_restored is True


def test_paste_sends_shortcut_and_restores_clipboard(monkeypatch) -> None:  # noqa: ANN001
    clipboard = FakeClipboard("previous")
    _install(monkeypatch, clipboard)

    result = ClipboardPasteService(restore_delay_s=0).paste_text("fix the tests")

    assert result.success is True
    assert result.clipboard_restored is True
    assert clipboard.history == ["fix the tests", "previous"]
    assert FakeController.actions == [
        ("down", "<ctrl>"),
        ("press", "v"),
        ("release", "v"),
        ("up", "<ctrl>"),
    ]


def test_paste_restores_clipboard_when_keyboard_fails(monkeypatch) -> None:  # noqa: ANN001
    clipboard = FakeClipboard("previous")
    _install(monkeypatch, clipboard, fail_keyboard=True)

    result = ClipboardPasteService(restore_delay_s=0).paste_text("hello")

    assert result.success is False
    assert result.reason.startswith(NO_ACTIVE_TARGET)
    assert result.clipboard_restored is True
    assert clipboard.content == "previous"


def test_copy_text(monkeypatch) -> None:  # noqa: ANN001
    clipboard = FakeClipboard()
    _install(monkeypatch, clipboard)

    result = ClipboardPasteService().copy_text("  refactor the parser \n")

    assert result.success is True
    assert result.reason == "Prompt copied to clipboard."
    assert clipboard.content == "refactor the parser"


def test_copy_text_failures(monkeypatch) -> None:  # noqa: ANN001
    service = ClipboardPasteService()

    assert service.copy_text("  ").reason == "Nothing to copy – prompt is empty."

    _install(monkeypatch, None)
    assert service.copy_text("hi").reason == "clipboard dependency missing"

    _install(monkeypatch, FakeClipboard(fail_copy=True))
    result = service.copy_text("hi")
    assert result.success is False
    assert result.reason == "Clipboard copy failed: no clipboard mechanism"


def test_keyboard_injector_types_and_submits(monkeypatch) -> None:  # noqa: ANN001
    _install(monkeypatch, FakeClipboard())

    result = KeyboardInjector().type_text("  add   a\nunit test ")

    assert result.success is True
    assert FakeController.actions == [
        ("type", "add a unit test"),
        ("press", "<enter>"),
        ("release", "<enter>"),
    ]


def test_keyboard_injector_without_submit(monkeypatch) -> None:  # noqa: ANN001
    _install(monkeypatch, FakeClipboard())

    KeyboardInjector(submit=False).type_text("hello")

    assert FakeController.actions == [("type", "hello")]


def test_keyboard_injector_failures(monkeypatch) -> None:  # noqa: ANN001
    assert KeyboardInjector().type_text(" \n ").success is False

    monkeypatch.setattr(auto_paste, "Controller", None)
    assert KeyboardInjector().type_text("hi").reason == "keyboard dependency missing"

    _install(monkeypatch, FakeClipboard(), fail_keyboard=True)
    result = KeyboardInjector().type_text("hi")
    assert result.success is False
    assert result.reason == f"{NO_ACTIVE_TARGET}: no display"
