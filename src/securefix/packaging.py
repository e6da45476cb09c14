from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence

from .logging import SecureFixLogger
from .metadata import manifest_path, metadata_path, write_manifest, write_metadata


class ArtifactUploader(Protocol):
    async def upload_artifact(self, name: str, files: Sequence[Path], root: Path) -> Any:
        ...


@dataclass(frozen=True)
class StagedFiles:
    metadata: Path
    manifest: Path


@contextmanager
def staged_files(
    directory: Path,
    artifact_name: str,
    metadata: Dict[str, Any],
    files_from_root_dir: Sequence[str],
    logger: Optional[SecureFixLogger] = None,
) -> Iterator[StagedFiles]:
    """
    Write `<name>.json` and `<name>_files.txt` and remove both on exit.

    Removal happens on every exit path so neither file leaks into later
    workflow steps.
    """
    staged: List[Path] = []
    try:
        meta = write_metadata(metadata_path(directory, artifact_name), metadata)
        staged.append(meta)
        manifest = write_manifest(manifest_path(directory, artifact_name), files_from_root_dir)
        staged.append(manifest)
        yield StagedFiles(metadata=meta, manifest=manifest)
    finally:
        for path in staged:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                if logger:
                    logger.warning("Failed to remove temporary file", path=str(path), error=str(exc))


def bundle_paths(workspace: Path, changed_files: Sequence[str], staged: StagedFiles) -> List[Path]:
    return [workspace / f for f in changed_files] + [staged.metadata, staged.manifest]


async def package_and_upload(
    uploader: ArtifactUploader,
    *,
    artifact_name: str,
    workspace: Path,
    changed_files: Sequence[str],
    changed_files_from_root_dir: Sequence[str],
    metadata: Dict[str, Any],
    logger: Optional[SecureFixLogger] = None,
) -> None:
    """Bundle the changed files with metadata + manifest and upload them."""
    with staged_files(
        workspace,
        artifact_name,
        metadata,
        changed_files_from_root_dir,
        logger=logger,
    ) as staged:
        paths = bundle_paths(workspace, changed_files, staged)
        await uploader.upload_artifact(artifact_name, paths, workspace)
