from __future__ import annotations

import asyncio
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .errors import ChangeListingError

GIT_LS_FILES_ARGS = ["git", "ls-files", "--modified", "--others", "--exclude-standard"]
DEFAULT_GIT_TIMEOUT_S = 120


@dataclass(frozen=True)
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


async def run_command(args: list[str], cwd: Path, timeout_s: int) -> CommandResult:
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return CommandResult(args=args, returncode=127, stdout="", stderr="command not found")

    try:
        stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        stdout_b, stderr_b = await proc.communicate()
        return CommandResult(
            args=args,
            returncode=-1,
            stdout=(stdout_b or b"").decode("utf-8", errors="ignore"),
            stderr=(stderr_b or b"").decode("utf-8", errors="ignore"),
            timed_out=True,
        )

    return CommandResult(
        args=args,
        returncode=int(proc.returncode or 0),
        stdout=(stdout_b or b"").decode("utf-8", errors="ignore"),
        stderr=(stderr_b or b"").decode("utf-8", errors="ignore"),
        timed_out=False,
    )


def parse_file_list(stdout: str) -> set[str]:
    return {line.strip() for line in stdout.splitlines() if line.strip()}


async def list_changed_files(
    cwd: Path,
    *,
    timeout_s: int = DEFAULT_GIT_TIMEOUT_S,
    runner=run_command,
) -> set[str]:
    """
    Modified tracked files plus untracked files not excluded by ignore rules,
    relative to `cwd`.
    """
    result = await runner(list(GIT_LS_FILES_ARGS), cwd, timeout_s)
    if result.timed_out:
        raise ChangeListingError(f"git ls-files timed out after {timeout_s}s")
    if result.returncode != 0:
        detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
        raise ChangeListingError(f"git ls-files failed: {detail}")
    return parse_file_list(result.stdout)


def filter_files(changed: Iterable[str], allow: Optional[Sequence[str]] = None) -> list[str]:
    """
    Restrict `changed` to the allow-list.

    With an allow-list the result keeps the allow-list order and silently drops
    entries that did not change. Without one every changed file is kept.
    """
    changed_set = set(changed)
    if not allow:
        return sorted(changed_set)
    seen: set[str] = set()
    filtered: list[str] = []
    for path in allow:
        if path in changed_set and path not in seen:
            seen.add(path)
            filtered.append(path)
    return filtered


def resolve_from_root_dir(root_dir: str, files: Iterable[str]) -> list[str]:
    """Join root_dir with each root-relative path, producing workspace-relative paths."""
    if not root_dir:
        return [posixpath.normpath(f) for f in files]
    return [posixpath.normpath(posixpath.join(root_dir, f)) for f in files]
