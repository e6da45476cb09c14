from __future__ import annotations

import os
import uuid
from typing import Dict, Optional

from ..models import HandoffResult


def _format_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def changed_file_outputs(result: HandoffResult) -> Dict[str, str]:
    if not result.has_changes:
        return {}
    return {
        "changed_files": "\n".join(result.changed_files),
        "changed_files_from_root_dir": "\n".join(result.changed_files_from_root_dir),
    }


def write_github_outputs(outputs: Dict[str, str], output_path: Optional[str] = None) -> None:
    """Append outputs to $GITHUB_OUTPUT (no-op outside Actions)."""
    path = output_path or os.environ.get("GITHUB_OUTPUT")
    if not path:
        return
    with open(path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(_format_output(name, value))
