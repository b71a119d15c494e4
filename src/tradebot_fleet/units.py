from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

SERVICE_PREFIX = "tradebot_"
SERVICE_SUFFIX = ".service"
SERVICE_GLOB = f"{SERVICE_PREFIX}*{SERVICE_SUFFIX}"
DEFAULT_LAUNCHER = "/usr/bin/java -jar"


def service_name_for(symbol: str) -> str:
    return f"{SERVICE_PREFIX}{symbol.lower()}{SERVICE_SUFFIX}"


def log_path_for(symbol: str, working_directory: str) -> str:
    return f"{working_directory}/output_{symbol.lower()}.log"


@dataclass(frozen=True)
class UnitSpec:
    symbol: str
    working_directory: str
    jar_path: str
    log_path: str
    user: str
    launcher: str = DEFAULT_LAUNCHER

    @property
    def service_name(self) -> str:
        return service_name_for(self.symbol)

    @property
    def unit_path(self) -> Path:
        return Path(self.working_directory) / self.service_name


def unit_spec_for(
    symbol: str,
    *,
    working_directory: Path,
    jar_name: str,
    user: str,
    launcher: str = DEFAULT_LAUNCHER,
) -> UnitSpec:
    workdir = str(working_directory)
    return UnitSpec(
        symbol=symbol,
        working_directory=workdir,
        jar_path=f"{workdir}/{jar_name}",
        log_path=log_path_for(symbol, workdir),
        user=user,
        launcher=launcher,
    )


def render_unit(spec: UnitSpec) -> str:
    empty = [f.name for f in fields(spec) if not str(getattr(spec, f.name)).strip()]
    if empty:
        raise ValueError(f"unit spec has empty fields: {', '.join(empty)}")
    lines = [
        "[Unit]",
        f"Description=Trading Bot for {spec.symbol}",
        "After=network.target",
        "",
        "[Service]",
        f"User={spec.user}",
        f"WorkingDirectory={spec.working_directory}",
        f"ExecStart={spec.launcher} {spec.jar_path} {spec.symbol}",
        f"StandardOutput=append:{spec.log_path}",
        f"StandardError=append:{spec.log_path}",
        "Restart=on-failure",
        "RestartSec=10",
        "",
        "[Install]",
        "WantedBy=multi-user.target",
    ]
    return "\n".join(lines) + "\n"
