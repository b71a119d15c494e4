from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TeardownStep = Literal["stop", "disable", "remove"]
InstallStep = Literal["write", "copy", "enable", "start"]


@dataclass(frozen=True)
class Ticker:
    symbol: str
    # Raw decimal string as returned by the exchange.
    quote_volume: str
    status: str


@dataclass(frozen=True)
class RankedPair:
    symbol: str
    quote_volume: float
