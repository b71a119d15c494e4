from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tradebot_fleet.errors import CredentialsError

_PROPERTY_LINE = re.compile(r"(?P<key>[^=:\s]+)\s*[=:]?\s*(?P<value>.*)$")


class ApiCredentials(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(alias="api.key", min_length=1)
    api_secret: str = Field(alias="api.secret", min_length=1, repr=False)


def parse_properties(text: str) -> dict[str, str]:
    """
    Parse `key=value`, `key: value` or `key value` lines; `#` and `!` start comments.
    """
    props: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        match = _PROPERTY_LINE.match(line)
        if match is None:
            continue
        props[match.group("key")] = match.group("value").strip()
    return props


def load_credentials(path: Path) -> ApiCredentials:
    if not path.is_file():
        raise CredentialsError(f"{path} not found")
    try:
        raw = parse_properties(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CredentialsError(f"cannot read {path}: {e}") from e
    missing = [key for key in ("api.key", "api.secret") if not raw.get(key)]
    if missing:
        raise CredentialsError(f"API credentials missing in {path}: {', '.join(missing)}")
    try:
        return ApiCredentials.model_validate(raw)
    except ValidationError as e:
        raise CredentialsError(f"invalid credentials in {path}: {e}") from e
