from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Sequence

from .constants import SIGNAL_PERMISSIONS
from .github import DEFAULT_API_URL, GitHubClient
from .logging import SecureFixLogger
from .models import Credential


class CredentialIssuer(Protocol):
    def create(
        self,
        *,
        app_id: str,
        private_key: str,
        owner: str,
        repositories: Sequence[str],
        permissions: Dict[str, str],
    ) -> Credential:
        ...

    def has_expired(self, expires_at: datetime) -> bool:
        ...

    def revoke(self, token: str) -> None:
        ...


class LabelClient(Protocol):
    def create_label(self, name: str, description: str) -> Any:
        ...


LabelClientFactory = Callable[[str, str], LabelClient]


def _revoke(issuer: CredentialIssuer, credential: Credential, logger: SecureFixLogger) -> None:
    try:
        issuer.revoke(credential.token)
    except Exception as exc:
        logger.warning("Failed to revoke GitHub App token", error=str(exc))


@contextmanager
def scoped_credential(
    issuer: CredentialIssuer,
    *,
    app_id: str,
    private_key: str,
    owner: str,
    repository: str,
    logger: SecureFixLogger,
    revoke_after_use: bool = False,
) -> Iterator[Credential]:
    """
    Issue an `issues: write` token for one repository and bound its lifetime.

    If the block fails after the token naturally expired, the failure is
    attributed to the expiry and suppressed without a revoke call. Otherwise
    the token is revoked once and the original exception propagates. On
    success the token is left to expire unless `revoke_after_use` is set.
    """
    credential = issuer.create(
        app_id=app_id,
        private_key=private_key,
        owner=owner,
        repositories=[repository],
        permissions=dict(SIGNAL_PERMISSIONS),
    )
    logger.info(
        "GitHub App token issued",
        repository=f"{owner}/{repository}",
        expires_at=credential.expires_at.isoformat(),
    )
    try:
        yield credential
    except Exception as exc:
        if issuer.has_expired(credential.expires_at):
            logger.info("GitHub App token has already expired", error=str(exc))
            return
        logger.info("Revoking GitHub App token")
        _revoke(issuer, credential, logger)
        raise
    except BaseException:
        # Interrupted or cancelled: still shrink the blast radius.
        if not issuer.has_expired(credential.expires_at):
            _revoke(issuer, credential, logger)
        raise
    else:
        if revoke_after_use:
            logger.info("Revoking GitHub App token after use")
            _revoke(issuer, credential, logger)


def emit_signal(
    issuer: CredentialIssuer,
    label_client_factory: LabelClientFactory,
    *,
    app_id: str,
    private_key: str,
    owner: str,
    server_repository: str,
    label_name: str,
    description: str,
    logger: SecureFixLogger,
    revoke_after_use: bool = False,
) -> bool:
    """
    Create label `label_name` on `owner/server_repository`.

    The label's existence is the signal for the trusted processor. Returns
    False when label creation failed only because the token had already
    expired.
    """
    signaled = False
    with scoped_credential(
        issuer,
        app_id=app_id,
        private_key=private_key,
        owner=owner,
        repository=server_repository,
        logger=logger,
        revoke_after_use=revoke_after_use,
    ) as credential:
        client = label_client_factory(credential.token, f"{owner}/{server_repository}")
        client.create_label(name=label_name, description=description)
        signaled = True
        logger.info(
            "Signal label created",
            label=label_name,
            repository=f"{owner}/{server_repository}",
            description=description,
        )
    return signaled


def default_label_client_factory(api_url: Optional[str] = None) -> LabelClientFactory:
    def factory(token: str, repo: str) -> LabelClient:
        return GitHubClient(token=token, repo=repo, api_url=api_url or DEFAULT_API_URL)

    return factory
