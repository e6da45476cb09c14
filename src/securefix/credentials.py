from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

import requests
from jose import jwt
from jose.exceptions import JOSEError

from .errors import CredentialError
from .github import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT_SECONDS
from .models import Credential

# GitHub rejects app JWTs valid for more than 10 minutes; iat is backdated
# to tolerate runner clock drift.
APP_JWT_BACKDATE_SECONDS = 60
APP_JWT_LIFETIME_SECONDS = 9 * 60


def parse_iso8601(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def has_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    current = now or datetime.now(timezone.utc)
    return current >= expires_at


def create_app_jwt(app_id: str, private_key: str, now: Optional[int] = None) -> str:
    issued_at = int(now if now is not None else time.time())
    claims = {
        "iat": issued_at - APP_JWT_BACKDATE_SECONDS,
        "exp": issued_at + APP_JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    try:
        return jwt.encode(claims, private_key, algorithm="RS256")
    except JOSEError as exc:
        raise CredentialError(f"Failed to sign GitHub App JWT: {exc}") from exc


class GitHubAppTokenIssuer:
    """Issues and revokes narrowly scoped GitHub App installation tokens."""

    def __init__(self, api_url: str = DEFAULT_API_URL, session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()

    @staticmethod
    def _headers(bearer: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {bearer}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "securefix-action",
        }

    def _installation_id(self, app_jwt: str, owner: str, repo: str) -> int:
        url = f"{self.api_url}/repos/{owner}/{repo}/installation"
        r = self.session.get(url, headers=self._headers(app_jwt), timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
        if r.status_code != 200:
            raise CredentialError(
                f"GitHub App is not installed on {owner}/{repo}: {r.status_code} {r.text}"
            )
        return int(r.json()["id"])

    def create(
        self,
        *,
        app_id: str,
        private_key: str,
        owner: str,
        repositories: Sequence[str],
        permissions: Dict[str, str],
    ) -> Credential:
        """Issue an installation token limited to `repositories` and `permissions`."""
        if not repositories:
            raise CredentialError("At least one repository is required to scope the token")
        app_jwt = create_app_jwt(app_id, private_key)
        installation_id = self._installation_id(app_jwt, owner, repositories[0])

        url = f"{self.api_url}/app/installations/{installation_id}/access_tokens"
        r = self.session.post(
            url,
            json={"repositories": list(repositories), "permissions": dict(permissions)},
            headers=self._headers(app_jwt),
            timeout=DEFAULT_HTTP_TIMEOUT_SECONDS,
        )
        if r.status_code != 201:
            raise CredentialError(f"Failed to create installation token: {r.status_code} {r.text}")
        body = r.json()
        return Credential(token=body["token"], expires_at=parse_iso8601(body["expires_at"]))

    def has_expired(self, expires_at: datetime) -> bool:
        return has_expired(expires_at)

    def revoke(self, token: str) -> None:
        url = f"{self.api_url}/installation/token"
        r = self.session.delete(url, headers=self._headers(token), timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
        if r.status_code != 204:
            raise CredentialError(f"Failed to revoke installation token: {r.status_code} {r.text}")
