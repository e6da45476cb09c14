from __future__ import annotations

from .constants import AUTOMERGE_METHODS
from .errors import ConfigError
from .models import PullRequestSpec


def validate_automerge_method(method: str) -> None:
    if method not in AUTOMERGE_METHODS:
        raise ConfigError(
            'automerge_method must be one of "", "merge", "squash", or "rebase" '
            f"(got {method!r})"
        )


def validate_pr(pr: PullRequestSpec) -> None:
    """
    A titled pull request is always acceptable. Without a title no pull request
    is requested, so any other pull request field is a configuration mistake.
    """
    if pr.title != "":
        return
    if not pr.is_empty():
        raise ConfigError("pull_request_title is required to create a pull request")


def validate_request_pr(pr: PullRequestSpec) -> None:
    """Run every pull request check, automerge method first."""
    validate_automerge_method(pr.automerge_method)
    validate_pr(pr)
