"""Application entrypoint.

Subcommands:
    (none) / tui   dictation TUI (default)
    last           launch Codex with the most recently saved prompt
    inject         headless: type each final into the focused window
    devices        list audio input devices
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from config import JsonConfigStore, load_settings
from env import LOGGER, setup_logging
from errors import GluCodeError

console = Console(stderr=True)


def _add_shared_args(parser: argparse.ArgumentParser, nested: bool = False) -> None:
    # Nested parsers must not overwrite values given before the subcommand.
    default = argparse.SUPPRESS if nested else None
    parser.add_argument("--model", default=default, help="Vosk model directory (default: $VOSK_MODEL_PATH)")
    parser.add_argument("--sample-rate", type=int, default=default, help="Audio sample rate (default: 16000)")
    parser.add_argument("--device", default=default, help="Capture device index or name (default: $STT_DEVICE)")
    parser.add_argument("--config", default=default, help="Path to config.json")
    parser.add_argument(
        "--verbose", action="store_true", default=argparse.SUPPRESS if nested else False, help="Debug logging"
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glu-code",
        description="Dictate a prompt, review it, and hand it to Codex in tmux",
    )
    _add_shared_args(parser)

    subparsers = parser.add_subparsers(dest="subcommand")
    _add_shared_args(subparsers.add_parser("tui", help="Dictation TUI (default)"), nested=True)
    last_parser = subparsers.add_parser("last", help="Launch Codex with the last saved prompt")
    _add_shared_args(last_parser, nested=True)
    last_parser.add_argument("--workdir", default=None, help="Working directory for Codex")
    inject_parser = subparsers.add_parser("inject", help="Type each final transcript into the focused window")
    _add_shared_args(inject_parser, nested=True)
    inject_parser.add_argument("--paste", action="store_true", help="Paste via the clipboard instead of typing")
    inject_parser.add_argument("--no-submit", action="store_true", help="Do not press Enter after each final")
    _add_shared_args(subparsers.add_parser("devices", help="List audio input devices"), nested=True)
    return parser


def list_audio_devices() -> int:
    import sounddevice as sd
    from rich.table import Table

    table = Table(title="Audio Input Devices")
    table.add_column("ID", style="cyan")
    table.add_column("Device", style="white")
    table.add_column("Default", style="green")
    for index, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            is_default = "Yes" if index == sd.default.device[0] else ""
            table.add_row(str(index), device["name"], is_default)
    Console().print(table)
    return 0


def _run_tui(args: argparse.Namespace) -> int:
    from prompt_store import PromptStore
    from tui import GluCodeApp

    settings = load_settings(_config_store(args), model_path=args.model, sample_rate=args.sample_rate, device=args.device)
    store = PromptStore()
    try:
        GluCodeApp(settings, store).run()
    finally:
        store.close()
    return 0


def _run_last(args: argparse.Namespace) -> int:
    from handoff import HandoffService
    from launcher import TmuxLauncher
    from prompt_store import PromptStore

    settings = load_settings(_config_store(args))
    store = PromptStore()
    try:
        prompt = store.get_last_prompt()
        if prompt is None:
            console.print("No prompts have been saved yet.")
            return 1
        handoff = HandoffService(
            store,
            TmuxLauncher(),
            workdir=args.workdir or os.getcwd(),
            codex_args=settings.codex_args,
        )
        handoff.select(prompt)
        result = handoff.launch(prompt.text)
    finally:
        store.close()
    console.print(result.message)
    return 0 if result.success else 1


def _run_inject(args: argparse.Namespace) -> int:
    from auto_paste import ClipboardPasteService, KeyboardInjector
    from inject import HeadlessInjector
    from transcript_session import TranscriptSession

    settings = load_settings(_config_store(args), model_path=args.model, sample_rate=args.sample_rate, device=args.device)
    injector = HeadlessInjector(
        TranscriptSession(),
        injector=KeyboardInjector(submit=not args.no_submit),
        paste_service=ClipboardPasteService() if args.paste else None,
        console=Console(),
    )
    return injector.run(settings)


def _config_store(args: argparse.Namespace) -> JsonConfigStore:
    return JsonConfigStore(Path(args.config).expanduser() if args.config else None)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    log_path = setup_logging(verbose=args.verbose)
    LOGGER.info("glu-code %s (log: %s)", args.subcommand or "tui", log_path)

    handlers = {
        None: _run_tui,
        "tui": _run_tui,
        "last": _run_last,
        "inject": _run_inject,
        "devices": lambda _args: list_audio_devices(),
    }
    try:
        return handlers[args.subcommand](args)
    except GluCodeError as exc:
        LOGGER.error("%s: %s", exc.code, exc.message)
        console.print(f"[red]{exc.message}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
