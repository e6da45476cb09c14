from __future__ import annotations

import os

from ..models import HandoffResult

MAX_LISTED_FILES = 100


def write_step_summary(result: HandoffResult, server_repository: str, owner: str) -> None:
    """
    Write GitHub Actions Step Summary.

    This appears in the job summary, providing quick visibility
    without clicking into logs.
    """
    summary_path = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_path:
        return

    lines = ["## Securefix", ""]
    if not result.has_changes:
        lines.append("No changes detected. Nothing was handed off.")
    else:
        lines.extend(
            [
                f"- Artifact: `{result.artifact_name}`",
                f"- Signal: label `{result.artifact_name}` on `{owner}/{server_repository}`",
                f"- Changed files: {len(result.changed_files)}",
                "",
            ]
        )
        for path in result.changed_files[:MAX_LISTED_FILES]:
            lines.append(f"  - `{path}`")
        hidden = len(result.changed_files) - MAX_LISTED_FILES
        if hidden > 0:
            lines.append(f"  - ... and {hidden} more")
    lines.append("")

    with open(summary_path, "a", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
