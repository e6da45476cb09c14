from __future__ import annotations

from securefix.models import HandoffResult
from securefix.publish import write_step_summary


def test_step_summary_lists_artifact_and_files(tmp_path, monkeypatch) -> None:
    summary_file = tmp_path / "summary.md"
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary_file))

    result = HandoffResult(
        artifact_name="securefix-x",
        changed_files=["web/a.ts"],
        changed_files_from_root_dir=["a.ts"],
    )
    write_step_summary(result, "securefix-server", "octo")

    content = summary_file.read_text(encoding="utf-8")
    assert "## Securefix" in content
    assert "`securefix-x`" in content
    assert "`octo/securefix-server`" in content
    assert "`web/a.ts`" in content


def test_step_summary_no_changes(tmp_path, monkeypatch) -> None:
    summary_file = tmp_path / "summary.md"
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary_file))

    write_step_summary(HandoffResult.empty("securefix-x"), "server", "octo")

    assert "No changes detected" in summary_file.read_text(encoding="utf-8")


def test_step_summary_skipped_outside_actions(monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    write_step_summary(HandoffResult.empty("securefix-x"), "server", "octo")
