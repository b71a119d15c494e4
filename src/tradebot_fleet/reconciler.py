from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from tradebot_fleet.context import ExecutionContext
from tradebot_fleet.errors import WorkingDirectoryError
from tradebot_fleet.system import CommandResult, SystemdManager
from tradebot_fleet.types import InstallStep, TeardownStep
from tradebot_fleet.units import SERVICE_GLOB, UnitSpec, render_unit, unit_spec_for


@dataclass(frozen=True)
class UnitFailure:
    symbol: str
    step: InstallStep
    detail: str


@dataclass
class InstallReport:
    written: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    started: list[str] = field(default_factory=list)
    failures: list[UnitFailure] = field(default_factory=list)
    installed: bool = False
    reloaded: bool = False

    def failed_symbols(self) -> set[str]:
        return {f.symbol for f in self.failures}


@dataclass(frozen=True)
class UnitTeardown:
    service_name: str
    failed_steps: tuple[TeardownStep, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed_steps

    @property
    def outcome(self) -> list[str]:
        if self.ok:
            return ["success"]
        return [f"{step}-failed" for step in self.failed_steps]


@dataclass
class DeleteReport:
    system: list[UnitTeardown] = field(default_factory=list)
    system_skipped: bool = False
    reloaded: bool | None = None
    local_removed: list[str] = field(default_factory=list)
    local_failures: list[str] = field(default_factory=list)


def manual_install_commands(
    *,
    working_directory: Path,
    unit_dir: Path,
    services: Iterable[str],
    systemctl: str = "systemctl",
) -> list[str]:
    commands = [
        f"sudo cp {working_directory}/{SERVICE_GLOB} {unit_dir}/",
        f"sudo {systemctl} daemon-reload",
    ]
    for service in services:
        commands.append(f"sudo {systemctl} enable {service}")
        commands.append(f"sudo {systemctl} start {service}")
    return commands


class UnitReconciler:
    """
    Makes the rendered and installed unit files match a ranked symbol list,
    or removes all of them.
    """

    def __init__(
        self,
        *,
        context: ExecutionContext,
        manager: SystemdManager,
        working_directory: Path,
        jar_name: str,
        launcher: str,
        systemctl: str = "systemctl",
        logger: logging.Logger | None = None,
    ) -> None:
        self._context = context
        self._manager = manager
        self.working_directory = working_directory
        self._jar_name = jar_name
        self._launcher = launcher
        self._systemctl = systemctl
        self._logger = logger or logging.getLogger("tradebot_fleet")

    def spec_for(self, symbol: str) -> UnitSpec:
        return unit_spec_for(
            symbol,
            working_directory=self.working_directory,
            jar_name=self._jar_name,
            user=self._context.user_name,
            launcher=self._launcher,
        )

    def ensure_working_directory(self) -> None:
        if self.working_directory.is_dir():
            return
        try:
            self.working_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkingDirectoryError(str(self.working_directory), str(e)) from e
        self._logger.info(
            f"Created working directory: {self.working_directory}",
            extra={"path": str(self.working_directory)},
        )

    def write_unit(self, spec: UnitSpec) -> Path:
        path = spec.unit_path
        path.write_text(render_unit(spec), encoding="utf-8")
        self._logger.info(f"Generated service file: {path}", extra={"symbol": spec.symbol})
        return path

    def install(self, symbols: Iterable[str]) -> InstallReport:
        report = InstallReport()
        self.ensure_working_directory()

        written: dict[str, Path] = {}
        for symbol in symbols:
            try:
                written[symbol] = self.write_unit(self.spec_for(symbol))
            except (OSError, ValueError) as e:
                self._fail(report, symbol=symbol, step="write", detail=str(e))
                continue
            report.written.append(symbol)

        if not written:
            self._logger.warning("No service files were written; nothing to install.")
            return report

        if not self._context.is_elevated:
            self._log_manual_instructions(list(written))
            return report

        self._install_units(written, report)
        return report

    def delete(self) -> DeleteReport:
        report = DeleteReport()
        if self._context.is_elevated:
            self._delete_system_units(report)
        else:
            report.system_skipped = True
            self._logger.info("Not running as root; skipping removal of installed system services.")
        self._delete_local_units(report)
        return report

    def _install_units(self, written: dict[str, Path], report: InstallReport) -> None:
        for symbol, path in written.items():
            result = self._manager.install_unit(path)
            if not result.ok:
                self._fail(report, symbol=symbol, step="copy", detail=result.describe())
                continue
            report.copied.append(symbol)

        if not report.copied:
            self._logger.error("No service files could be copied; services were not installed.")
            return

        reload_result = self._manager.daemon_reload()
        report.reloaded = reload_result.ok
        if not reload_result.ok:
            self._logger.error(
                f"Failed to reload systemd: {reload_result.describe()}",
                extra={"exit_code": reload_result.exit_code},
            )

        for symbol in report.copied:
            service = self.spec_for(symbol).service_name
            enabled = self._manager.enable(service)
            if not enabled.ok:
                self._fail(report, symbol=symbol, step="enable", detail=enabled.describe())
            started = self._manager.start(service)
            if not started.ok:
                self._fail(report, symbol=symbol, step="start", detail=started.describe())
                continue
            report.started.append(symbol)

        if not report.started:
            failed = ", ".join(f"{f.symbol}:{f.step}" for f in report.failures)
            self._logger.warning(f"No services were started; failures: {failed}")
            return

        report.installed = True
        if report.failures:
            failed = ", ".join(f"{f.symbol}:{f.step}" for f in report.failures)
            self._logger.warning(
                f"Started {len(report.started)} service(s) with failures: {failed}"
            )
        else:
            self._logger.info("Services installed, enabled, and started automatically.")
        self._logger.info(
            "Monitor with: systemctl status tradebot_<symbol>.service (run as sudo if needed)"
        )
        self._logger.info(f"Logs in: {self.working_directory}/output_<symbol>.log")

    def _log_manual_instructions(self, symbols: list[str]) -> None:
        self._logger.warning(
            "Not running as root. Services generated but not installed. "
            "Run this program with sudo for automatic installation."
        )
        commands = manual_install_commands(
            working_directory=self.working_directory,
            unit_dir=self._manager.unit_dir,
            services=[self.spec_for(s).service_name for s in symbols],
            systemctl=self._systemctl,
        )
        self._logger.info(
            "To install and run manually:\n"
            + "\n".join(commands)
            + f"\nMonitor with: sudo {self._systemctl} status tradebot_<symbol>.service"
            + f"\nLogs in: {self.working_directory}/output_<symbol>.log"
        )

    def _delete_system_units(self, report: DeleteReport) -> None:
        unit_dir = self._manager.unit_dir
        if not unit_dir.is_dir():
            self._logger.info(f"System unit directory {unit_dir} not found; nothing to remove.")
            return
        paths = sorted(unit_dir.glob(SERVICE_GLOB))
        if not paths:
            self._logger.info(f"No {SERVICE_GLOB} files found in {unit_dir}.")
            return

        for path in paths:
            report.system.append(self._teardown(path))

        reload_result = self._manager.daemon_reload()
        report.reloaded = reload_result.ok
        if reload_result.ok:
            self._logger.info("Reloaded systemd after removing services.")
        else:
            self._logger.error(
                f"Failed to reload systemd: {reload_result.describe()}",
                extra={"exit_code": reload_result.exit_code},
            )

    def _teardown(self, path: Path) -> UnitTeardown:
        service = path.name
        failed: list[TeardownStep] = []
        steps: list[tuple[TeardownStep, CommandResult]] = [
            ("stop", self._manager.stop(service)),
            ("disable", self._manager.disable(service)),
            ("remove", self._manager.remove_unit(path)),
        ]
        for step, result in steps:
            if result.ok:
                continue
            failed.append(step)
            self._logger.warning(
                f"Failed to {step} {service}: {result.describe()}",
                extra={"service": service, "step": step, "exit_code": result.exit_code},
            )
        if not failed:
            self._logger.info(f"Removed service {service}", extra={"service": service})
        return UnitTeardown(service_name=service, failed_steps=tuple(failed))

    def _delete_local_units(self, report: DeleteReport) -> None:
        workdir = self.working_directory
        if not workdir.is_dir():
            self._logger.info(f"Working directory {workdir} does not exist; nothing to delete.")
            return
        paths = sorted(workdir.glob(SERVICE_GLOB))
        if not paths:
            self._logger.info(f"No {SERVICE_GLOB} files found in {workdir}.")
            return
        for path in paths:
            try:
                path.unlink()
            except OSError as e:
                report.local_failures.append(path.name)
                self._logger.warning(
                    f"Failed to delete {path}: {e}",
                    extra={"path": str(path)},
                )
                continue
            report.local_removed.append(path.name)
            self._logger.info(f"Deleted local service file: {path}", extra={"path": str(path)})

    def _fail(self, report: InstallReport, *, symbol: str, step: InstallStep, detail: str) -> None:
        report.failures.append(UnitFailure(symbol=symbol, step=step, detail=detail))
        self._logger.error(
            f"Failed to {step} service for {symbol}: {detail}",
            extra={"symbol": symbol, "step": step},
        )
