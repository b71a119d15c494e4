from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

_COMMAND_NOT_EXECUTABLE = 126
_COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    exit_code: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def describe(self) -> str:
        text = f"command '{' '.join(self.argv)}' failed with exit code {self.exit_code}"
        detail = self.output.strip()
        return f"{text}: {detail}" if detail else text


class CommandRunner(Protocol):
    def run(self, argv: Sequence[str]) -> CommandResult: ...


class SubprocessRunner:
    """
    Run one command at a time, blocking until it exits. No timeout.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("tradebot_fleet.system")

    def run(self, argv: Sequence[str]) -> CommandResult:
        args = tuple(argv)
        try:
            proc = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except PermissionError as e:
            return CommandResult(argv=args, exit_code=_COMMAND_NOT_EXECUTABLE, output=str(e))
        except OSError as e:
            return CommandResult(argv=args, exit_code=_COMMAND_NOT_FOUND, output=str(e))
        for line in proc.stdout.splitlines():
            self._logger.info(line, extra={"argv": list(args)})
        return CommandResult(argv=args, exit_code=proc.returncode, output=proc.stdout)


class SystemdManager:
    def __init__(
        self,
        runner: CommandRunner,
        *,
        unit_dir: Path,
        systemctl: str = "systemctl",
    ) -> None:
        self._runner = runner
        self.unit_dir = unit_dir
        self._systemctl = systemctl

    def daemon_reload(self) -> CommandResult:
        return self._runner.run([self._systemctl, "daemon-reload"])

    def enable(self, service: str) -> CommandResult:
        return self._runner.run([self._systemctl, "enable", service])

    def start(self, service: str) -> CommandResult:
        return self._runner.run([self._systemctl, "start", service])

    def stop(self, service: str) -> CommandResult:
        return self._runner.run([self._systemctl, "stop", service])

    def disable(self, service: str) -> CommandResult:
        return self._runner.run([self._systemctl, "disable", service])

    def install_unit(self, path: Path) -> CommandResult:
        return self._runner.run(["cp", str(path), f"{self.unit_dir}/"])

    def remove_unit(self, path: Path) -> CommandResult:
        return self._runner.run(["rm", "-f", str(path)])
