from __future__ import annotations

import getpass
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True)
class ExecutionContext:
    """Who the units run as, where they live, and whether we may install them."""

    user_name: str
    home: Path
    is_elevated: bool


def _home_of(user_name: str) -> Path:
    try:
        return Path(pwd.getpwnam(user_name).pw_dir)
    except KeyError:
        return Path("/home") / user_name


def resolve_execution_context(
    environ: Mapping[str, str] | None = None,
    euid: int | None = None,
) -> ExecutionContext:
    env = os.environ if environ is None else environ
    uid = os.geteuid() if euid is None else euid

    sudo_user = env.get("SUDO_USER", "").strip()
    if sudo_user and sudo_user != "root":
        return ExecutionContext(user_name=sudo_user, home=_home_of(sudo_user), is_elevated=uid == 0)
    try:
        entry = pwd.getpwuid(uid)
    except KeyError:
        return ExecutionContext(user_name=getpass.getuser(), home=Path.home(), is_elevated=uid == 0)
    return ExecutionContext(
        user_name=entry.pw_name,
        home=Path(entry.pw_dir),
        is_elevated=uid == 0,
    )
