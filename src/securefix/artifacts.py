from __future__ import annotations

import hashlib
import io
import os
import zipfile
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from .errors import ArtifactUploadError
from .logging import SecureFixLogger

ARTIFACT_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
ARTIFACT_VERSION = 4
REQUEST_TIMEOUT_SECONDS = 30
UPLOAD_TIMEOUT_SECONDS = 300
INVALID_NAME_CHARACTERS = ('"', ":", "<", ">", "|", "*", "?", "\r", "\n", "\\", "/")


def backend_ids_from_token(runtime_token: str) -> Tuple[str, str]:
    """
    Extract the workflow run / job backend IDs from ACTIONS_RUNTIME_TOKEN.

    The token's `scp` claim carries a scope of the form
    `Actions.Results:<run backend id>:<job backend id>`.
    """
    try:
        claims = jwt.get_unverified_claims(runtime_token)
    except JOSEError as exc:
        raise ArtifactUploadError(f"ACTIONS_RUNTIME_TOKEN is not a valid JWT: {exc}") from exc

    for scope in str(claims.get("scp") or "").split(" "):
        parts = scope.split(":")
        if parts[0] != "Actions.Results":
            continue
        if len(parts) != 3 or not parts[1] or not parts[2]:
            raise ArtifactUploadError(f"Malformed Actions.Results scope in runtime token: {scope}")
        return parts[1], parts[2]
    raise ArtifactUploadError("Runtime token has no Actions.Results scope")


def validate_artifact_name(name: str) -> None:
    if not name:
        raise ArtifactUploadError("Artifact name must not be empty")
    bad = [c for c in INVALID_NAME_CHARACTERS if c in name]
    if bad:
        raise ArtifactUploadError(f"Artifact name {name!r} contains invalid characters: {bad!r}")


def build_zip(files: Sequence[Path], root: Path) -> bytes:
    """
    Zip `files` with archive paths relative to `root`.

    Archive names come from the paths as given, so a symlink is stored under
    its own name with the target's content. Directories (an untracked nested
    repository is listed as `sub/`) become directory entries.
    """
    root_abs = Path(os.path.abspath(root))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file_path in files:
            absolute = Path(os.path.abspath(file_path))
            try:
                arcname = absolute.relative_to(root_abs).as_posix()
            except ValueError as exc:
                raise ArtifactUploadError(
                    f"{file_path} is not under the artifact root {root}"
                ) from exc
            if not (absolute.is_file() or absolute.is_dir()):
                raise ArtifactUploadError(f"Artifact file not found: {file_path}")
            archive.write(absolute, arcname)
    return buffer.getvalue()


class ArtifactClient:
    """Uploads workflow artifacts to the GitHub Actions artifact service (v4)."""

    def __init__(
        self,
        results_url: str,
        runtime_token: str,
        logger: Optional[SecureFixLogger] = None,
    ):
        self.results_url = results_url.rstrip("/")
        self.runtime_token = runtime_token
        self.logger = logger

    @classmethod
    def from_environment(cls, logger: Optional[SecureFixLogger] = None) -> "ArtifactClient":
        return cls(
            results_url=os.environ.get("ACTIONS_RESULTS_URL", ""),
            runtime_token=os.environ.get("ACTIONS_RUNTIME_TOKEN", ""),
            logger=logger,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.runtime_token}",
            "Content-Type": "application/json",
            "User-Agent": "securefix-action",
        }

    async def _twirp(self, client: httpx.AsyncClient, method: str, body: dict) -> dict:
        url = f"{self.results_url}/{ARTIFACT_SERVICE}/{method}"
        response = await client.post(url, json=body, headers=self._headers())
        if response.status_code != 200:
            raise ArtifactUploadError(
                f"{method} failed with status {response.status_code}: {response.text}"
            )
        payload = response.json() or {}
        if not payload.get("ok"):
            raise ArtifactUploadError(f"{method} was rejected by the artifact service")
        return payload

    async def upload_artifact(self, name: str, files: Sequence[Path], root: Path) -> str:
        """
        Zip `files` relative to `root` and upload them as artifact `name`.

        All-or-nothing: any failed step raises ArtifactUploadError and the
        artifact is never finalized. Returns the artifact ID.
        """
        if not self.results_url or not self.runtime_token:
            raise ArtifactUploadError(
                "ACTIONS_RESULTS_URL and ACTIONS_RUNTIME_TOKEN are required to upload artifacts"
            )
        validate_artifact_name(name)
        run_id, job_id = backend_ids_from_token(self.runtime_token)
        content = build_zip(files, root)
        digest = hashlib.sha256(content).hexdigest()
        ids = {"workflowRunBackendId": run_id, "workflowJobRunBackendId": job_id}

        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS) as client:
            created = await self._twirp(
                client,
                "CreateArtifact",
                {**ids, "name": name, "version": ARTIFACT_VERSION},
            )
            upload_url = created.get("signedUploadUrl")
            if not upload_url:
                raise ArtifactUploadError("CreateArtifact returned no signed upload URL")

            put_response = await client.put(
                upload_url,
                content=content,
                headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
                timeout=UPLOAD_TIMEOUT_SECONDS,
            )
            if put_response.status_code not in (200, 201):
                raise ArtifactUploadError(
                    f"Artifact blob upload failed with status {put_response.status_code}"
                )

            finalized = await self._twirp(
                client,
                "FinalizeArtifact",
                {**ids, "name": name, "size": str(len(content)), "hash": f"sha256:{digest}"},
            )

        artifact_id = str(finalized.get("artifactId", ""))
        if self.logger:
            self.logger.info(
                "Artifact uploaded",
                artifact=name,
                artifact_id=artifact_id,
                size=len(content),
                files=len(files),
            )
        return artifact_id
