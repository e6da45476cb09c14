from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, SecretStr, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import HandoffRequest, ProjectLink, PullRequestSpec


def split_lines(value: str) -> List[str]:
    """Split a multi-line action input into trimmed, non-empty entries."""
    return [line.strip() for line in (value or "").strip().splitlines() if line.strip()]


class SecureFixConfig(BaseSettings):
    """Configuration loaded from GitHub Actions inputs."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        frozen=True,
        extra="ignore",
    )

    # Required
    app_id: str = Field(description="GitHub App ID used to issue the signal token")
    app_private_key: SecretStr = Field(description="GitHub App private key (PEM)")
    server_repository: str = Field(
        description="Repository (same owner) where the signal label is created",
    )
    commit_message: str = Field(description="Commit message for the fix commit")
    workspace: str = Field(
        validation_alias=AliasChoices("INPUT_WORKSPACE", "GITHUB_WORKSPACE"),
        description="Absolute path the artifact is rooted at",
    )

    # Change collection
    root_dir: str = Field(default="", description="Directory changed files are listed from")
    files: str = Field(default="", description="Optional newline-separated allow-list")

    # Commit target
    repository: str = Field(default="", description="Repository the fix is pushed to")
    branch: str = Field(default="", description="Branch the fix is pushed to")
    fail_if_changes: bool = Field(default=False)

    # Pull request
    pull_request_title: str = Field(default="")
    pull_request_body: str = Field(default="")
    pull_request_base_branch: str = Field(default="")
    pull_request_labels: str = Field(default="")
    pull_request_assignees: str = Field(default="")
    pull_request_reviewers: str = Field(default="")
    pull_request_team_reviewers: str = Field(default="")
    pull_request_draft: bool = Field(default=False)
    pull_request_comment: str = Field(default="")
    automerge_method: str = Field(default="")
    project_number: conint(ge=0) = Field(default=0)
    project_owner: str = Field(default="")
    project_id: str = Field(default="")
    milestone_number: conint(ge=0) = Field(default=0)

    # Token lifecycle
    revoke_token_after_signal: bool = Field(
        default=False,
        description="Revoke the signal token after a successful signal instead of letting it expire",
    )

    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias=AliasChoices("INPUT_GITHUB_API_URL", "GITHUB_API_URL"),
    )

    @field_validator(
        "fail_if_changes",
        "pull_request_draft",
        "revoke_token_after_signal",
        mode="before",
    )
    @classmethod
    def _empty_bool_is_false(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            return stripped.lower() if stripped else False
        return value

    @field_validator("project_number", "milestone_number", mode="before")
    @classmethod
    def _empty_int_is_zero(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            return stripped if stripped else 0
        return value

    @field_validator(
        "app_id",
        "server_repository",
        "root_dir",
        "repository",
        "branch",
        "automerge_method",
        "pull_request_base_branch",
        mode="before",
    )
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("app_id", "server_repository", "workspace")
    @classmethod
    def _required_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("workspace")
    @classmethod
    def _absolute_workspace(cls, value: str) -> str:
        if not Path(value).is_absolute():
            raise ValueError("workspace must be an absolute path")
        return value

    def project(self) -> Optional[ProjectLink]:
        if not (self.project_number or self.project_id):
            return None
        return ProjectLink(
            number=self.project_number,
            owner=self.project_owner,
            id=self.project_id,
        )

    def pull_request(self) -> PullRequestSpec:
        return PullRequestSpec(
            title=self.pull_request_title,
            body=self.pull_request_body,
            base=self.pull_request_base_branch,
            labels=split_lines(self.pull_request_labels),
            assignees=split_lines(self.pull_request_assignees),
            reviewers=split_lines(self.pull_request_reviewers),
            team_reviewers=split_lines(self.pull_request_team_reviewers),
            draft=self.pull_request_draft,
            comment=self.pull_request_comment,
            automerge_method=self.automerge_method,
            project=self.project(),
            milestone_number=self.milestone_number,
        )

    def to_request(self) -> HandoffRequest:
        return HandoffRequest(
            app_id=self.app_id,
            private_key=self.app_private_key.get_secret_value(),
            server_repository=self.server_repository,
            commit_message=self.commit_message,
            workspace=Path(self.workspace),
            root_dir=self.root_dir,
            repo=self.repository,
            branch=self.branch,
            fail_if_changes=self.fail_if_changes,
            files=tuple(dict.fromkeys(split_lines(self.files))),
            pr=self.pull_request(),
            revoke_after_use=self.revoke_token_after_signal,
        )
