"""Launch Codex with a prompt inside a new tmux window."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import time
from typing import List, Optional, Sequence

from env import LOGGER
from errors import EMPTY_PROMPT, LAUNCH_FAILED, TMUX_MISSING, LaunchError
from models import LaunchResult

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    digits = []
    while True:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
        if number == 0:
            return "".join(reversed(digits))


def default_window_name(prompt_id: Optional[int] = None) -> str:
    if prompt_id:
        return f"codex-{prompt_id}"
    return f"codex-{_base36(int(time.time() * 1000))}"


def build_codex_command(prompt: str, extra_args: Sequence[str] = (), executable: str = "codex") -> str:
    parts = [executable, shlex.quote(prompt)] + [shlex.quote(arg) for arg in extra_args]
    return " ".join(parts)


class TmuxLauncher:
    def __init__(self, tmux: str = "tmux", codex: str = "codex") -> None:
        self._tmux = tmux
        self._codex = codex

    def available(self) -> bool:
        return shutil.which(self._tmux) is not None

    def launch(
        self,
        prompt: str,
        workdir: Optional[str] = None,
        extra_args: Sequence[str] = (),
        window_name: Optional[str] = None,
    ) -> LaunchResult:
        prompt = prompt.strip()
        if not prompt:
            raise LaunchError(EMPTY_PROMPT)
        if not self.available():
            raise LaunchError(TMUX_MISSING)

        cwd = os.path.abspath(workdir) if workdir else os.getcwd()
        command = build_codex_command(prompt, extra_args, self._codex)
        name = window_name or default_window_name()
        args = [self._tmux, "new-window", "-n", name, "-c", cwd, command]
        LOGGER.info("launching codex in tmux window %s", name)
        try:
            subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise LaunchError(LAUNCH_FAILED, f"tmux spawn failed: {exc}") from exc
        return LaunchResult(window_name=name, command=command)

    def list_windows(self) -> Optional[List[str]]:
        """Return ``index:name`` entries, or ``None`` when tmux is not running."""
        if not self.available():
            return None
        try:
            result = subprocess.run(
                [self._tmux, "list-windows", "-F", "#I:#W"],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError:
            return None
        if result.returncode != 0:
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
