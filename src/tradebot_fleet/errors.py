from __future__ import annotations


class FleetError(RuntimeError):
    """Base class for errors that abort a run."""


class CredentialsError(FleetError):
    pass


class WorkingDirectoryError(FleetError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to create working directory {path}: {reason}")
        self.path = path


class DataFormatError(FleetError):
    def __init__(self, *, symbol: str, field: str, value: object) -> None:
        super().__init__(f"invalid {field} for {symbol}: {value!r}")
        self.symbol = symbol
        self.field = field
        self.value = value
