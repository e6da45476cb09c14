from __future__ import annotations

import pytest

from securefix.errors import ConfigError
from securefix.models import ProjectLink, PullRequestSpec
from securefix.validation import validate_automerge_method, validate_pr, validate_request_pr


@pytest.mark.parametrize("method", ["", "merge", "squash", "rebase"])
def test_valid_automerge_methods_pass(method: str) -> None:
    validate_automerge_method(method)


@pytest.mark.parametrize("method", ["Merge", "fast-forward", " squash", "rebase-merge", "none"])
def test_invalid_automerge_methods_fail(method: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        validate_automerge_method(method)
    assert "automerge_method must be one of" in str(excinfo.value)


def test_empty_pr_spec_is_valid() -> None:
    validate_pr(PullRequestSpec())


@pytest.mark.parametrize(
    "fields",
    [
        {"body": "details"},
        {"base": "main"},
        {"labels": ["fix"]},
        {"assignees": ["octo"]},
        {"reviewers": ["octo"]},
        {"team_reviewers": ["core"]},
        {"draft": True},
        {"comment": "please review"},
        {"automerge_method": "squash"},
        {"project": ProjectLink(number=1, owner="octo")},
        {"milestone_number": 3},
    ],
)
def test_titleless_pr_with_any_field_fails(fields: dict) -> None:
    with pytest.raises(ConfigError) as excinfo:
        validate_pr(PullRequestSpec(**fields))
    assert "pull_request_title is required" in str(excinfo.value)


def test_titled_pr_always_passes() -> None:
    validate_pr(
        PullRequestSpec(
            title="Apply fixes",
            body="details",
            base="main",
            labels=["fix"],
            draft=True,
            automerge_method="merge",
            milestone_number=2,
        )
    )


def test_request_validation_checks_automerge_before_title() -> None:
    spec = PullRequestSpec(automerge_method="bogus")
    with pytest.raises(ConfigError) as excinfo:
        validate_request_pr(spec)
    assert "automerge_method" in str(excinfo.value)
