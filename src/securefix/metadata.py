from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .context import ActionContext
from .models import HandoffRequest


def metadata_path(directory: Path, artifact_name: str) -> Path:
    return directory / f"{artifact_name}.json"


def manifest_path(directory: Path, artifact_name: str) -> Path:
    return directory / f"{artifact_name}_files.txt"


def build_metadata(request: HandoffRequest, context: ActionContext) -> Dict[str, Any]:
    """
    Traceability document uploaded next to the changed files.

    `context` identifies the triggering run; `inputs` echoes what the trusted
    processor needs to commit the changes and open the pull request.
    """
    return {
        "context": context.to_dict(),
        "inputs": {
            "repository": request.repo,
            "branch": request.branch,
            "commit_message": request.commit_message,
            "root_dir": request.root_dir,
            "pull_request": request.pr.model_dump(mode="json"),
        },
    }


def write_metadata(path: Path, metadata: Dict[str, Any]) -> Path:
    path.write_text(json.dumps(metadata, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def render_manifest(files: Sequence[str]) -> str:
    return "".join(f"{f}\n" for f in files)


def write_manifest(path: Path, files: Sequence[str]) -> Path:
    path.write_text(render_manifest(files), encoding="utf-8")
    return path
