from __future__ import annotations
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional


DEFAULT_PUSH_COMMAND = "git push origin HEAD:refs/for/master"
PUSH_COMMAND_ENV = "BITCALC_PUSH_COMMAND"


class CommandError(Exception):
    """Raised when the external command cannot be started."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command
        self.message = message


@dataclass(frozen=True)
class CommandResult:
    command: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs one external command with the caller's terminal attached.

    Output is not captured: the child inherits stdout and stderr, so the
    user sees it as it is produced. Only the exit status comes back.
    """

    def __init__(self, command: str, *, cwd: Optional[str] = None) -> None:
        if not command or not command.strip():
            raise CommandError(command, "External command must be a non-empty string")
        self.command = command
        self.cwd = cwd

    def run(self) -> CommandResult:
        run_kwargs: Dict[str, object] = {"shell": True}
        if self.cwd is not None:
            run_kwargs["cwd"] = self.cwd
        try:
            completed = subprocess.run(self.command, **run_kwargs)
        except OSError as exc:
            raise CommandError(self.command, f"Failed to run '{self.command}': {exc}") from exc
        return CommandResult(command=self.command, returncode=int(completed.returncode))
