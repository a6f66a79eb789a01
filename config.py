"""Simple JSON-based config store plus environment overrides."""

from __future__ import annotations

import json
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from env import LOGGER, config_dir

DEFAULT_SAMPLE_RATE = 16000


def default_model_path() -> str:
    return str(Path.home() / ".local" / "share" / "vosk" / "model")


@dataclass(frozen=True)
class AppSettings:
    model_path: str
    sample_rate: int = DEFAULT_SAMPLE_RATE
    device: Optional[str] = None
    codex_args: Tuple[str, ...] = field(default_factory=tuple)


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or config_dir() / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def get_model_path(self) -> str:
        return str(self.get("model_path", "") or "")

    def set_model_path(self, path: str) -> None:
        self.set("model_path", path)

    def get_sample_rate(self) -> int:
        return _as_int(self.get("sample_rate"), DEFAULT_SAMPLE_RATE)

    def get_device(self) -> str:
        return str(self.get("device", "") or "")

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            LOGGER.warning("ignoring unreadable config file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def load_settings(
    store: JsonConfigStore,
    environ: Optional[Mapping[str, str]] = None,
    model_path: Optional[str] = None,
    sample_rate: Optional[int] = None,
    device: Optional[str] = None,
) -> AppSettings:
    """Resolve settings: explicit arguments, then environment, then file, then defaults."""
    environ = os.environ if environ is None else environ

    resolved_model = (
        model_path
        or environ.get("VOSK_MODEL_PATH")
        or store.get_model_path()
        or default_model_path()
    )
    resolved_rate = sample_rate or _as_int(environ.get("STT_SAMPLE_RATE"), 0) or store.get_sample_rate()
    resolved_device = device or environ.get("STT_DEVICE") or store.get_device() or None

    codex_args = store.get("codex_args", [])
    if isinstance(codex_args, str):
        codex_args = shlex.split(codex_args)
    elif not isinstance(codex_args, list):
        codex_args = []

    return AppSettings(
        model_path=str(Path(resolved_model).expanduser()),
        sample_rate=resolved_rate,
        device=resolved_device,
        codex_args=tuple(str(arg) for arg in codex_args),
    )


def _as_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
