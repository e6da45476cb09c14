from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Optional

from .constants import ARTIFACT_NAME_PREFIX, MAX_LABEL_NAME_LENGTH

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 12


def new_name(prefix: str, length: int = SUFFIX_LENGTH) -> str:
    """
    Append a random suffix to `prefix`.

    The suffix only uses [a-z0-9] so the result is safe as a file name, an
    artifact name and a label name. 36**12 values keeps concurrent runs that
    share a timestamp prefix from colliding.
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))
    name = f"{prefix}{suffix}"
    if len(name) > MAX_LABEL_NAME_LENGTH:
        raise ValueError(f"Generated name exceeds {MAX_LABEL_NAME_LENGTH} characters: {name}")
    return name


def timestamp_prefix(now: Optional[datetime] = None) -> str:
    current = now or datetime.now()
    return f"{ARTIFACT_NAME_PREFIX}-{current.strftime('%Y%m%d%H%M%S')}-"


def new_artifact_name(now: Optional[datetime] = None) -> str:
    """Name shared by the signal label, the artifact and its temp files."""
    return new_name(timestamp_prefix(now))
