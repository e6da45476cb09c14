from __future__ import annotations

from .outputs import changed_file_outputs, write_github_outputs
from .step_summary import write_step_summary

__all__ = [
    "changed_file_outputs",
    "write_github_outputs",
    "write_step_summary",
]
