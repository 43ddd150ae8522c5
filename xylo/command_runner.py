"""Blocking execution of external build commands, with a dry-run recorder."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence
import logging
import shlex
import subprocess


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and captured output of one command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandError(RuntimeError):
    """Raised when a checked command exits with a non-zero status."""

    def __init__(self, result: CommandResult):
        super().__init__(
            f"Command failed with exit code {result.returncode}: {format_command(result.command)}\n"
            f"stdout: {result.stdout}\n"
            f"stderr: {result.stderr}"
        )
        self.result = result


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


class CommandRunner:
    """Abstract command runner interface."""

    def run(self, command: Sequence[str], *, cwd: Path | None = None, check: bool = True) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Runs commands to completion via :mod:`subprocess`, without a timeout."""

    def run(self, command: Sequence[str], *, cwd: Path | None = None, check: bool = True) -> CommandResult:
        logger.debug("Running %s (cwd=%s)", format_command(command), cwd)
        process = subprocess.run(
            list(command),
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
        )
        result = CommandResult(
            command=command,
            returncode=process.returncode,
            stdout=process.stdout,
            stderr=process.stderr,
        )
        if check and not result.succeeded:
            raise CommandError(result)
        return result


class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them."""

    def __init__(self) -> None:
        self.commands: List[dict] = []

    def run(self, command: Sequence[str], *, cwd: Path | None = None, check: bool = True) -> CommandResult:
        self.commands.append({"command": list(command), "cwd": str(cwd) if cwd else None})
        return CommandResult(command=command, returncode=0, stdout="", stderr="")

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record["cwd"]:
                parts.append(f"(cwd={record['cwd']})")
            parts.append(format_command(record["command"]))
            yield " ".join(parts)
