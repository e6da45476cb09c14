from __future__ import annotations

from enum import Enum


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    CHANGES_DETECTED = 1
    ERROR = 2


AUTOMERGE_METHODS = ("", "merge", "squash", "rebase")

ARTIFACT_NAME_PREFIX = "securefix"

# Every run owns exactly one label name; GitHub caps label names at 50 chars.
MAX_LABEL_NAME_LENGTH = 50

SIGNAL_PERMISSIONS = {"issues": "write"}

CHANGES_DETECTED_MESSAGE = "Changes detected. A commit will be pushed"
NO_CHANGES_MESSAGE = "No changes"
