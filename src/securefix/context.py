from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


def _load_event(event_path: Optional[str]) -> Dict[str, Any]:
    if not event_path:
        return {}
    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _coerce_int(value: Any) -> int:
    try:
        return int(value) if value not in (None, "") else 0
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class ActionContext:
    """Immutable GitHub Actions context of the workflow run doing the handoff."""

    owner: str
    repo: str
    run_id: int

    event_name: str = ""
    sha: str = ""
    ref: str = ""
    workflow: str = ""
    action: str = ""
    actor: str = ""
    job: str = ""
    run_number: int = 0
    run_attempt: int = 0
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"
    graphql_url: str = "https://api.github.com/graphql"
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "ActionContext":
        """Load context from GitHub Actions environment."""
        env = os.environ if environ is None else environ
        payload = _load_event(env.get("GITHUB_EVENT_PATH"))

        repo_full_name = (
            env.get("GITHUB_REPOSITORY")
            or (payload.get("repository") or {}).get("full_name")
            or ""
        )
        if not repo_full_name or "/" not in repo_full_name:
            raise RuntimeError("Missing or invalid GITHUB_REPOSITORY")
        owner, repo = repo_full_name.split("/", 1)

        return cls(
            owner=owner,
            repo=repo,
            run_id=_coerce_int(env.get("GITHUB_RUN_ID")),
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            sha=env.get("GITHUB_SHA", ""),
            ref=env.get("GITHUB_REF", ""),
            workflow=env.get("GITHUB_WORKFLOW", ""),
            action=env.get("GITHUB_ACTION", ""),
            actor=env.get("GITHUB_ACTOR", ""),
            job=env.get("GITHUB_JOB", ""),
            run_number=_coerce_int(env.get("GITHUB_RUN_NUMBER")),
            run_attempt=_coerce_int(env.get("GITHUB_RUN_ATTEMPT")),
            api_url=env.get("GITHUB_API_URL") or "https://api.github.com",
            server_url=env.get("GITHUB_SERVER_URL") or "https://github.com",
            graphql_url=env.get("GITHUB_GRAPHQL_URL") or "https://api.github.com/graphql",
            payload=payload,
        )

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def provenance(self) -> str:
        """Label description identifying the run that raised the signal."""
        return f"{self.owner}/{self.repo}/{self.run_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Context in the shape the downstream processor reads from metadata."""
        return {
            "payload": self.payload,
            "eventName": self.event_name,
            "sha": self.sha,
            "ref": self.ref,
            "workflow": self.workflow,
            "action": self.action,
            "actor": self.actor,
            "job": self.job,
            "runNumber": self.run_number,
            "runAttempt": self.run_attempt,
            "runId": self.run_id,
            "apiUrl": self.api_url,
            "serverUrl": self.server_url,
            "graphqlUrl": self.graphql_url,
            "repo": {"owner": self.owner, "repo": self.repo},
        }
