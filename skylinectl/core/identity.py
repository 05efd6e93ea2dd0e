"""Title id resolution."""

from __future__ import annotations

import re

from skylinectl.core.errors import BadTitleIdError, NoTitleIdError

_TITLE_ID_RE = re.compile(r"^[0-9a-f]{16}$", re.IGNORECASE)


def validate_title_id(title_id: str) -> str:
    normalized = title_id.strip()
    if not _TITLE_ID_RE.match(normalized):
        raise BadTitleIdError(f"Invalid title id '{title_id}': expected exactly 16 hexadecimal characters")
    return normalized


def resolve_title_id(explicit: str | None, project_title_id: str | None) -> str:
    """Explicit title id wins, then the one declared in ``Cargo.toml``."""
    for candidate in (explicit, project_title_id):
        if candidate is not None and candidate.strip():
            return validate_title_id(candidate)
    raise NoTitleIdError()
