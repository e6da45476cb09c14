from __future__ import annotations

from typing import Optional

from .constants import ExitCode


class SecureFixError(Exception):
    """Base exception for all securefix errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(SecureFixError):
    """Inputs are invalid or inconsistent. Raised before any external call."""

    exit_code = ExitCode.ERROR


class ChangeListingError(SecureFixError):
    """Listing changed files with git failed."""


class CredentialError(SecureFixError):
    """The GitHub App installation token could not be issued or revoked."""


class ArtifactUploadError(SecureFixError):
    """The artifact service rejected one of the upload steps."""


class SignalError(SecureFixError):
    """The signal label could not be created."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
