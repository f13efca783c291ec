"""Privileged file moves and copies.

The hosts file is owned by the administrator, so toggling or replacing it goes
through an `ElevatedExecutor`. Calls block until the helper exits, including any
interactive password prompt; there is no timeout here.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Protocol, Sequence

from hostdni.errors import IOFailureError
from hostdni.logger import get_logger

_logger = get_logger("services.elevation")


class ElevatedExecutor(Protocol):
    name: str

    def move(self, src: Path, dst: Path) -> None: ...

    def copy(self, src: Path, dst: Path) -> None: ...


class DirectExecutor:
    """Runs in-process; used when the service already has the needed rights."""

    name = "direct"

    def move(self, src: Path, dst: Path) -> None:
        try:
            os.replace(src, dst)
        except OSError as exc:
            raise IOFailureError.from_os_error(f"Failed to move {src} to {dst}", exc) from exc

    def copy(self, src: Path, dst: Path) -> None:
        try:
            shutil.copyfile(src, dst)
        except OSError as exc:
            raise IOFailureError.from_os_error(f"Failed to copy {src} to {dst}", exc) from exc


def _run_helper(cmd: Sequence[str], *, action: str) -> None:
    try:
        proc = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise IOFailureError(f"Failed to execute command: {exc}") from exc
    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        _logger.warning(
            "elevation.command.fail",
            "Privileged command failed",
            action=action,
            helper=cmd[0],
            exit_code=proc.returncode,
            stderr=stderr,
        )
        raise IOFailureError(f"Failed to {action}: {stderr or f'exit_{proc.returncode}'}")
    _logger.info("elevation.command.ok", "Privileged command succeeded", action=action, helper=cmd[0])


class CommandExecutor:
    """Prefixes `mv`/`cp` with a privilege helper such as `sudo -n` or `pkexec`."""

    def __init__(self, prefix: Sequence[str]) -> None:
        self._prefix = list(prefix)
        self.name = self._prefix[0]

    def move(self, src: Path, dst: Path) -> None:
        _run_helper([*self._prefix, "mv", str(src), str(dst)], action=f"move {src} to {dst}")

    def copy(self, src: Path, dst: Path) -> None:
        _run_helper([*self._prefix, "cp", str(src), str(dst)], action=f"copy {src} to {dst}")


class OsascriptExecutor:
    """Shows the native macOS administrator prompt."""

    name = "osascript"

    def _run(self, verb: str, src: Path, dst: Path, action: str) -> None:
        shell = f"{verb} {shlex.quote(str(src))} {shlex.quote(str(dst))}"
        escaped = shell.replace("\\", "\\\\").replace('"', '\\"')
        script = f'do shell script "{escaped}" with administrator privileges'
        _run_helper(["osascript", "-e", script], action=action)

    def move(self, src: Path, dst: Path) -> None:
        self._run("mv", src, dst, action=f"move {src} to {dst}")

    def copy(self, src: Path, dst: Path) -> None:
        self._run("cp", src, dst, action=f"copy {src} to {dst}")


def build_executor(mode: str) -> ElevatedExecutor:
    selected = mode.strip().lower()
    if selected == "auto":
        if sys.platform == "darwin":
            selected = "osascript"
        elif hasattr(os, "geteuid") and os.geteuid() == 0:
            selected = "direct"
        else:
            selected = "sudo"

    if selected == "osascript":
        return OsascriptExecutor()
    if selected == "sudo":
        return CommandExecutor(["sudo", "-n"])
    if selected == "pkexec":
        return CommandExecutor(["pkexec"])
    if selected == "direct":
        return DirectExecutor()
    raise ValueError(f"Unknown elevation mode: {mode}")
