from __future__ import annotations

import asyncio
import sys
import uuid

from .artifacts import ArtifactClient
from .config import SecureFixConfig
from .constants import CHANGES_DETECTED_MESSAGE, ExitCode
from .context import ActionContext
from .credentials import GitHubAppTokenIssuer
from .errors import SecureFixError
from .handoff import Collaborators, run_handoff
from .logging import SecureFixLogger
from .models import HandoffResult
from .publish import changed_file_outputs, write_github_outputs, write_step_summary
from .signaling import default_label_client_factory

ACTION_VERSION = "1.0.0"


def exit_code_for(result: HandoffResult) -> int:
    if result.has_changes and result.changes_detected_failure:
        return int(ExitCode.CHANGES_DETECTED)
    return int(ExitCode.SUCCESS)


def report_result(result: HandoffResult, logger: SecureFixLogger) -> int:
    if not result.has_changes:
        return int(ExitCode.SUCCESS)
    if result.changes_detected_failure:
        logger.error(CHANGES_DETECTED_MESSAGE)
    else:
        logger.notice(CHANGES_DETECTED_MESSAGE)
    logger.info("\n".join(result.changed_files))
    return exit_code_for(result)


def publish_artifact_name(name: str) -> None:
    write_github_outputs({"artifact_name": name})


def main() -> int:
    """Main entry point."""
    return asyncio.run(async_main())


async def async_main() -> int:
    """Async main entry point."""
    logger = SecureFixLogger(str(uuid.uuid4()))

    try:
        config = SecureFixConfig()
    except Exception as exc:
        print(f"::error::Configuration error: {exc}")
        return int(ExitCode.ERROR)

    try:
        ctx = ActionContext.from_environment()
    except Exception as exc:
        print(f"::error::Failed to load GitHub context: {exc}")
        return int(ExitCode.ERROR)

    request = config.to_request()
    logger.info(
        "Securefix starting",
        version=ACTION_VERSION,
        repo=ctx.repo_full_name,
        run=ctx.run_id,
        server_repository=request.server_repository,
        root_dir=request.root_dir,
    )

    try:
        collaborators = Collaborators(
            uploader=ArtifactClient.from_environment(logger=logger),
            issuer=GitHubAppTokenIssuer(api_url=config.github_api_url),
            label_client_factory=default_label_client_factory(config.github_api_url),
        )
        result = await run_handoff(
            request, ctx, collaborators, logger, on_artifact_name=publish_artifact_name
        )
    except SecureFixError as exc:
        logger.error(str(exc), error_type=type(exc).__name__)
        return int(exc.exit_code)
    except Exception as exc:
        logger.error(f"Unexpected error: {exc}", error_type=type(exc).__name__)
        return int(ExitCode.ERROR)

    write_github_outputs(changed_file_outputs(result))
    try:
        write_step_summary(result, request.server_repository, ctx.owner)
    except OSError as exc:
        logger.warning("Failed to write step summary", error=str(exc))

    return report_result(result, logger)


if __name__ == "__main__":
    sys.exit(main())
