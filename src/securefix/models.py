from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectLink(BaseModel):
    """GitHub Projects (v2) board the pull request should be added to."""

    model_config = ConfigDict(frozen=True)

    number: int = 0
    owner: str = ""
    id: Optional[str] = None


class PullRequestSpec(BaseModel):
    """Pull request the downstream processor is asked to open."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    body: str = ""
    base: str = ""
    labels: List[str] = Field(default_factory=list)
    assignees: List[str] = Field(default_factory=list)
    reviewers: List[str] = Field(default_factory=list)
    team_reviewers: List[str] = Field(default_factory=list)
    draft: bool = False
    comment: str = ""
    # Kept as a plain string so validation can report the offending value.
    automerge_method: str = ""
    project: Optional[ProjectLink] = None
    milestone_number: int = 0

    def is_empty(self) -> bool:
        """True when every field other than the title is empty or default."""
        return not (
            self.body
            or self.base
            or self.labels
            or self.assignees
            or self.reviewers
            or self.team_reviewers
            or self.draft
            or self.comment
            or self.automerge_method
            or self.project
            or self.milestone_number
        )


@dataclass(frozen=True)
class HandoffRequest:
    """Everything one run needs. Never mutated after construction."""

    app_id: str
    private_key: str
    server_repository: str
    commit_message: str
    workspace: Path
    root_dir: str = ""
    repo: str = ""
    branch: str = ""
    fail_if_changes: bool = False
    files: tuple[str, ...] = ()
    pr: PullRequestSpec = field(default_factory=PullRequestSpec)
    revoke_after_use: bool = False

    @property
    def has_commit_target(self) -> bool:
        return bool(self.repo or self.branch)

    def __repr__(self) -> str:
        return (
            f"HandoffRequest(app_id={self.app_id!r}, server_repository={self.server_repository!r}, "
            f"root_dir={self.root_dir!r}, repo={self.repo!r}, branch={self.branch!r}, "
            f"files={self.files!r}, private_key='***')"
        )


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"Credential(token='***', expires_at={self.expires_at.isoformat()!r})"


@dataclass
class HandoffResult:
    artifact_name: str
    changed_files: List[str] = field(default_factory=list)
    changed_files_from_root_dir: List[str] = field(default_factory=list)
    # Set when changes were handed off but the run must still fail so the
    # pipeline stops for follow-up.
    changes_detected_failure: bool = False

    @classmethod
    def empty(cls, artifact_name: str) -> "HandoffResult":
        return cls(artifact_name=artifact_name)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_files)
