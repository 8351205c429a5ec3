"""Lightweight GitHub REST client for listing open pull requests."""

from __future__ import annotations

import logging
from typing import Any

import requests

from prfiles.exceptions import GitHubApiError
from prfiles.github.pull_request import PullRequestDescriptor

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


def split_repo(owner_slash_repo: str) -> tuple[str, str]:
    """Split "owner/repo" into its two halves."""
    owner, sep, name = owner_slash_repo.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Expected OWNER/REPO, got: {owner_slash_repo!r}")
    return owner, name


class GitHubClient:
    """Fetches open pull request listings from the GitHub REST API."""

    def __init__(
        self,
        token: str | None = None,
        api_base_url: str = GITHUB_API,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        user_agent: str = "prfiles",
    ) -> None:
        self.token = token
        self.api_base_url = api_base_url.rstrip("/")
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self.api_base_url + path
        try:
            resp = self.session.get(
                url, headers=self._headers(), params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise GitHubApiError(f"GET {path} failed: {e}", status_code=0, endpoint=path) from e
        if resp.status_code >= 400:
            raise GitHubApiError(
                f"GET {path} failed: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
                endpoint=path,
            )
        return resp.json()

    def list_open_pull_requests(self, owner_slash_repo: str) -> list[PullRequestDescriptor]:
        """Open pull requests of `owner/repo` (first page of the listing only)."""
        owner, name = split_repo(owner_slash_repo)
        data = self.get(f"/repos/{owner}/{name}/pulls", params={"state": "open"})
        if not isinstance(data, list):
            raise GitHubApiError(
                f"Unexpected pulls payload for {owner}/{name}",
                status_code=200,
                endpoint=f"/repos/{owner}/{name}/pulls",
            )
        logger.info("Found %d open pull request(s) in %s/%s", len(data), owner, name)
        return [PullRequestDescriptor.from_api(item) for item in data]

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
