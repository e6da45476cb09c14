from __future__ import annotations

import sys
from pathlib import Path

import pytest

from securefix.changes import (
    GIT_LS_FILES_ARGS,
    CommandResult,
    filter_files,
    list_changed_files,
    parse_file_list,
    resolve_from_root_dir,
    run_command,
)
from securefix.errors import ChangeListingError


def test_parse_file_list_trims_and_dedupes() -> None:
    stdout = "a.txt\n  b/c.py \n\na.txt\n"
    assert parse_file_list(stdout) == {"a.txt", "b/c.py"}


def test_filter_without_allow_list_keeps_everything() -> None:
    changed = {"b.txt", "a.txt"}
    assert set(filter_files(changed)) == changed
    assert set(filter_files(changed, ())) == changed


def test_filter_with_allow_list_is_intersection_in_allow_order() -> None:
    changed = {"a.txt", "b.txt", "c.txt"}
    assert filter_files(changed, ["c.txt", "missing.txt", "a.txt"]) == ["c.txt", "a.txt"]


def test_filter_drops_allow_list_entries_that_did_not_change() -> None:
    assert filter_files({"a.txt"}, ["b.txt"]) == []


def test_resolve_from_root_dir() -> None:
    assert resolve_from_root_dir("", ["a.txt"]) == ["a.txt"]
    assert resolve_from_root_dir("pkg", ["a.txt", "sub/b.txt"]) == ["pkg/a.txt", "pkg/sub/b.txt"]
    assert resolve_from_root_dir("pkg/", ["a.txt"]) == ["pkg/a.txt"]


@pytest.mark.anyio
async def test_list_changed_files_runs_git_ls_files(tmp_path: Path) -> None:
    calls = []

    async def fake_runner(args, cwd, timeout_s):
        calls.append((args, cwd))
        return CommandResult(args=args, returncode=0, stdout="a.txt\nnew/b.txt\n", stderr="")

    files = await list_changed_files(tmp_path, runner=fake_runner)

    assert files == {"a.txt", "new/b.txt"}
    assert calls == [(GIT_LS_FILES_ARGS, tmp_path)]


@pytest.mark.anyio
async def test_list_changed_files_empty_output(tmp_path: Path) -> None:
    async def fake_runner(args, cwd, timeout_s):
        return CommandResult(args=args, returncode=0, stdout="\n", stderr="")

    assert await list_changed_files(tmp_path, runner=fake_runner) == set()


@pytest.mark.anyio
async def test_list_changed_files_raises_on_git_failure(tmp_path: Path) -> None:
    async def fake_runner(args, cwd, timeout_s):
        return CommandResult(args=args, returncode=128, stdout="", stderr="fatal: not a git repository")

    with pytest.raises(ChangeListingError) as excinfo:
        await list_changed_files(tmp_path, runner=fake_runner)
    assert "not a git repository" in str(excinfo.value)


@pytest.mark.anyio
async def test_list_changed_files_raises_on_timeout(tmp_path: Path) -> None:
    async def fake_runner(args, cwd, timeout_s):
        return CommandResult(args=args, returncode=-1, stdout="", stderr="", timed_out=True)

    with pytest.raises(ChangeListingError):
        await list_changed_files(tmp_path, runner=fake_runner)


@pytest.mark.anyio
async def test_run_command_captures_stdout(tmp_path: Path) -> None:
    result = await run_command([sys.executable, "-c", "print('hello')"], tmp_path, timeout_s=30)
    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


@pytest.mark.anyio
async def test_run_command_missing_binary(tmp_path: Path) -> None:
    result = await run_command(["definitely-not-a-real-binary-xyz"], tmp_path, timeout_s=5)
    assert result.returncode == 127
