from __future__ import annotations

from pathlib import Path

import pytest

from securefix.context import ActionContext


def test_context_parses_environment(event_push_path: Path) -> None:
    ctx = ActionContext.from_environment(
        {
            "GITHUB_REPOSITORY": "octo/repo",
            "GITHUB_RUN_ID": "987",
            "GITHUB_EVENT_NAME": "push",
            "GITHUB_EVENT_PATH": str(event_push_path),
            "GITHUB_SHA": "headsha123",
            "GITHUB_ACTOR": "octo",
            "GITHUB_RUN_ATTEMPT": "2",
        }
    )

    assert ctx.owner == "octo"
    assert ctx.repo == "repo"
    assert ctx.run_id == 987
    assert ctx.run_attempt == 2
    assert ctx.payload["after"] == "headsha123"
    assert ctx.provenance == "octo/repo/987"


def test_context_requires_repository() -> None:
    with pytest.raises(RuntimeError):
        ActionContext.from_environment({"GITHUB_RUN_ID": "1"})


def test_context_tolerates_missing_event_file(tmp_path: Path) -> None:
    ctx = ActionContext.from_environment(
        {"GITHUB_REPOSITORY": "octo/repo", "GITHUB_EVENT_PATH": str(tmp_path / "missing.json")}
    )
    assert ctx.payload == {}
    assert ctx.run_id == 0


def test_context_reads_os_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/app")
    monkeypatch.setenv("GITHUB_RUN_ID", "55")
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    assert ActionContext.from_environment().provenance == "octo/app/55"


def test_context_to_dict_shape() -> None:
    ctx = ActionContext(owner="octo", repo="app", run_id=3, event_name="push", sha="abc")
    data = ctx.to_dict()
    assert data["repo"] == {"owner": "octo", "repo": "app"}
    assert data["runId"] == 3
    assert data["eventName"] == "push"
    assert data["sha"] == "abc"
