import logging
from pathlib import Path
from typing import Sequence

import pytest

from tradebot_fleet.context import ExecutionContext
from tradebot_fleet.reconciler import UnitReconciler
from tradebot_fleet.system import CommandResult, SubprocessRunner, SystemdManager


class _FakeRunner:
    def __init__(self, *, failing: set[tuple[str, ...]] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.failing = failing or set()

    def run(self, argv: Sequence[str]) -> CommandResult:
        args = tuple(argv)
        self.calls.append(args)
        if args in self.failing:
            return CommandResult(argv=args, exit_code=5, output="unit not loaded")
        return CommandResult(argv=args, exit_code=0)


def _reconciler(tmp_path: Path, *, elevated: bool, runner: _FakeRunner) -> UnitReconciler:
    return UnitReconciler(
        context=ExecutionContext(user_name="alice", home=tmp_path, is_elevated=elevated),
        manager=SystemdManager(runner, unit_dir=tmp_path / "systemd"),
        working_directory=tmp_path / "trader_bots",
        jar_name="tradingbot.jar",
        launcher="/usr/bin/java -jar",
        logger=logging.getLogger("tradebot_fleet.test"),
    )


def _touch(directory: Path, *names: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text("[Unit]\n", encoding="utf-8")


def test_delete_without_root_and_missing_workdir_is_noop(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    runner = _FakeRunner()

    report = _reconciler(tmp_path, elevated=False, runner=runner).delete()

    assert report.system_skipped is True
    assert report.system == []
    assert report.local_removed == []
    assert runner.calls == []
    assert list(tmp_path.iterdir()) == []
    messages = [r.getMessage() for r in caplog.records]
    assert any("skipping removal" in m for m in messages)
    assert any("does not exist" in m for m in messages)


def test_delete_removes_only_matching_local_files(tmp_path: Path) -> None:
    workdir = tmp_path / "trader_bots"
    _touch(workdir, "tradebot_btcusdc.service", "tradebot_ethusdc.service", "other.service")
    (workdir / "output_btcusdc.log").write_text("log", encoding="utf-8")

    report = _reconciler(tmp_path, elevated=False, runner=_FakeRunner()).delete()

    assert report.local_removed == ["tradebot_btcusdc.service", "tradebot_ethusdc.service"]
    assert sorted(p.name for p in workdir.iterdir()) == ["other.service", "output_btcusdc.log"]


def test_delete_with_empty_workdir_logs_noop(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    (tmp_path / "trader_bots").mkdir()

    report = _reconciler(tmp_path, elevated=False, runner=_FakeRunner()).delete()

    assert report.local_removed == []
    assert "No tradebot_*.service files found" in caplog.text


def test_delete_as_root_stops_disables_removes_and_reloads(tmp_path: Path) -> None:
    unit_dir = tmp_path / "systemd"
    _touch(unit_dir, "tradebot_ethusdc.service", "tradebot_btcusdc.service", "sshd.service")
    runner = _FakeRunner()

    report = _reconciler(tmp_path, elevated=True, runner=runner).delete()

    assert runner.calls == [
        ("systemctl", "stop", "tradebot_btcusdc.service"),
        ("systemctl", "disable", "tradebot_btcusdc.service"),
        ("rm", "-f", str(unit_dir / "tradebot_btcusdc.service")),
        ("systemctl", "stop", "tradebot_ethusdc.service"),
        ("systemctl", "disable", "tradebot_ethusdc.service"),
        ("rm", "-f", str(unit_dir / "tradebot_ethusdc.service")),
        ("systemctl", "daemon-reload"),
    ]
    assert [t.outcome for t in report.system] == [["success"], ["success"]]
    assert report.reloaded is True
    assert report.system_skipped is False


def test_delete_failures_are_accumulated_per_unit(tmp_path: Path) -> None:
    unit_dir = tmp_path / "systemd"
    _touch(unit_dir, "tradebot_btcusdc.service", "tradebot_ethusdc.service")
    runner = _FakeRunner(
        failing={
            ("systemctl", "stop", "tradebot_btcusdc.service"),
            ("systemctl", "disable", "tradebot_btcusdc.service"),
            ("systemctl", "daemon-reload"),
        }
    )

    report = _reconciler(tmp_path, elevated=True, runner=runner).delete()

    btc, eth = report.system
    assert btc.failed_steps == ("stop", "disable")
    assert btc.outcome == ["stop-failed", "disable-failed"]
    assert ("rm", "-f", str(unit_dir / "tradebot_btcusdc.service")) in runner.calls
    assert eth.ok is True
    assert report.reloaded is False


def test_delete_as_root_with_missing_unit_dir_still_cleans_workdir(tmp_path: Path) -> None:
    _touch(tmp_path / "trader_bots", "tradebot_solusdc.service")
    runner = _FakeRunner()

    report = _reconciler(tmp_path, elevated=True, runner=runner).delete()

    assert runner.calls == []
    assert report.system == []
    assert report.reloaded is None
    assert report.local_removed == ["tradebot_solusdc.service"]


def test_delete_keeps_going_when_systemctl_cannot_run(tmp_path: Path) -> None:
    unit_dir = tmp_path / "systemd"
    _touch(unit_dir, "tradebot_btcusdc.service", "tradebot_ethusdc.service")
    _touch(tmp_path / "trader_bots", "tradebot_btcusdc.service")
    systemctl = tmp_path / "systemctl"
    systemctl.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    systemctl.chmod(0o644)
    reconciler = UnitReconciler(
        context=ExecutionContext(user_name="alice", home=tmp_path, is_elevated=True),
        manager=SystemdManager(SubprocessRunner(), unit_dir=unit_dir, systemctl=str(systemctl)),
        working_directory=tmp_path / "trader_bots",
        jar_name="tradingbot.jar",
        launcher="/usr/bin/java -jar",
        logger=logging.getLogger("tradebot_fleet.test"),
    )

    report = reconciler.delete()

    assert [t.service_name for t in report.system] == [
        "tradebot_btcusdc.service",
        "tradebot_ethusdc.service",
    ]
    assert all(t.failed_steps == ("stop", "disable") for t in report.system)
    assert report.reloaded is False
    assert report.local_removed == ["tradebot_btcusdc.service"]
