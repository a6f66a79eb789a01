"""Shared fixtures: fake STT helpers and isolated app directories."""

from __future__ import annotations

import sys
import textwrap
import time
from pathlib import Path
from typing import Callable, List

import pytest

HELPER_PRELUDE = """
import json
import os
import signal
import sys
import time


def emit(obj):
    sys.stdout.write(json.dumps(obj) + "\\n")
    sys.stdout.flush()


def wait_forever():
    while True:
        time.sleep(0.05)
"""


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    return _wait_until


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    path = tmp_path / "vosk-model-small"
    path.mkdir()
    return path


@pytest.fixture
def make_helper(tmp_path: Path) -> Callable[[str], List[str]]:
    """Write a fake helper script and return the command that runs it."""

    def _make(body: str) -> List[str]:
        script = tmp_path / f"fake_helper_{len(list(tmp_path.glob('fake_helper_*')))}.py"
        script.write_text(HELPER_PRELUDE + textwrap.dedent(body), encoding="utf-8")
        return [sys.executable, str(script)]

    return _make


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("VOSK_MODEL_PATH", "STT_DEVICE", "STT_SAMPLE_RATE"):
        monkeypatch.delenv(name, raising=False)
