from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .errors import SignalError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_HTTP_TIMEOUT_SECONDS = 15


class GitHubClient:
    def __init__(self, token: str, repo: str, api_url: str = DEFAULT_API_URL):
        self.token = token
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "securefix-action",
        })

    def create_label(self, name: str, description: str, color: Optional[str] = None) -> Dict[str, Any]:
        """Create a label on `repo`. Any non-201 response raises SignalError."""
        url = f"{self.api_url}/repos/{self.repo}/labels"
        payload: Dict[str, Any] = {"name": name, "description": description}
        if color:
            payload["color"] = color
        r = self.session.post(url, json=payload, timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
        if r.status_code != 201:
            raise SignalError(
                f"Failed to create label {name} on {self.repo}: {r.status_code} {r.text}",
                status_code=r.status_code,
            )
        try:
            return r.json() or {}
        except ValueError:
            return {}
