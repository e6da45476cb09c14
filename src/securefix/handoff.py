from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Optional

from .changes import filter_files, list_changed_files, resolve_from_root_dir
from .constants import NO_CHANGES_MESSAGE
from .context import ActionContext
from .logging import SecureFixLogger
from .metadata import build_metadata
from .models import HandoffRequest, HandoffResult
from .naming import new_artifact_name
from .packaging import ArtifactUploader, package_and_upload
from .signaling import CredentialIssuer, LabelClientFactory, emit_signal
from .validation import validate_request_pr


@dataclass
class Collaborators:
    """External systems one handoff talks to."""

    uploader: ArtifactUploader
    issuer: CredentialIssuer
    label_client_factory: LabelClientFactory
    list_changed_files: Callable[[Path], Awaitable[set[str]]] = list_changed_files
    name_generator: Callable[[], str] = field(default=new_artifact_name)


def changes_cwd(request: HandoffRequest) -> Path:
    if not request.root_dir:
        return request.workspace
    return request.workspace / request.root_dir


async def run_handoff(
    request: HandoffRequest,
    context: ActionContext,
    collaborators: Collaborators,
    logger: SecureFixLogger,
    on_artifact_name: Optional[Callable[[str], None]] = None,
) -> HandoffResult:
    """
    Package the working tree changes and signal the trusted processor.

    Validation runs before any I/O. An empty change set (before or after the
    allow-list) ends the run with an empty result and no upload, token or
    label.

    `on_artifact_name` receives the artifact name as soon as it exists, so it
    can be published even when a later stage fails.
    """
    validate_request_pr(request.pr)

    artifact_name = collaborators.name_generator()
    logger.run_id = artifact_name
    logger.info("Artifact name generated", artifact_name=artifact_name)
    if on_artifact_name is not None:
        on_artifact_name(artifact_name)

    with logger.stage("list_changes"):
        changed = await collaborators.list_changed_files(changes_cwd(request))
    if not changed:
        logger.notice(NO_CHANGES_MESSAGE)
        return HandoffResult.empty(artifact_name)

    from_root_dir = filter_files(changed, request.files)
    if not from_root_dir:
        logger.notice(NO_CHANGES_MESSAGE, allow_list=list(request.files))
        return HandoffResult.empty(artifact_name)

    changed_files = resolve_from_root_dir(request.root_dir, from_root_dir)

    with logger.stage("upload"):
        await package_and_upload(
            collaborators.uploader,
            artifact_name=artifact_name,
            workspace=request.workspace,
            changed_files=changed_files,
            changed_files_from_root_dir=from_root_dir,
            metadata=build_metadata(request, context),
            logger=logger,
        )

    with logger.stage("signal"):
        signaled = emit_signal(
            collaborators.issuer,
            collaborators.label_client_factory,
            app_id=request.app_id,
            private_key=request.private_key,
            owner=context.owner,
            server_repository=request.server_repository,
            label_name=artifact_name,
            description=context.provenance,
            logger=logger,
            revoke_after_use=request.revoke_after_use,
        )
    if not signaled:
        logger.warning(
            "Signal label was not created because the GitHub App token had already expired",
            label=artifact_name,
        )

    return HandoffResult(
        artifact_name=artifact_name,
        changed_files=changed_files,
        changed_files_from_root_dir=from_root_dir,
        changes_detected_failure=request.fail_if_changes or not request.has_commit_target,
    )
