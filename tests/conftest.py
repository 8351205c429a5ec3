"""Shared test fixtures for prfiles."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from prfiles.github.pull_request import PullRequest, PullRequestDescriptor


def make_response(
    status_code: int,
    body: str | bytes = b"",
    headers: dict[str, str] | None = None,
    reason: str = "",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.headers.update(headers or {})
    response.reason = reason
    response.encoding = "utf-8"
    return response


def make_session(routes: dict[str, requests.Response]) -> Mock:
    """A Session mock that answers GETs from `routes` keyed by URL."""
    session = Mock(spec=requests.Session)

    def get(url, **kwargs):
        return routes[url]

    session.get.side_effect = get
    return session


def make_pull(
    branch: str,
    files: list[str] | Exception,
    number: int = 1,
) -> PullRequest:
    """A PullRequest whose fetcher returns a git diff touching `files`."""
    fetcher = Mock()
    if isinstance(files, Exception):
        fetcher.fetch.side_effect = files
    else:
        fetcher.fetch.return_value = "".join(git_diff_section(f) for f in files)
    descriptor = PullRequestDescriptor(
        diff_url=f"https://github.com/o/r/pull/{number}.diff",
        html_url=f"https://github.com/o/r/pull/{number}",
        branch_label=branch,
        number=number,
    )
    return PullRequest(descriptor, fetcher)


def git_diff_section(path: str) -> str:
    return (
        f"diff --git a/{path} b/{path}\n"
        "index 1111111..2222222 100644\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        "@@ -1,2 +1,2 @@\n"
        " keep\n"
        "-old\n"
        "+new\n"
    )


@pytest.fixture
def pulls_payload() -> list[dict]:
    """Two items shaped like GET /repos/{owner}/{repo}/pulls."""
    return [
        {
            "number": 12,
            "title": "Fix login",
            "diff_url": "https://github.com/o/r/pull/12.diff",
            "html_url": "https://github.com/o/r/pull/12",
            "_links": {"html": {"href": "https://github.com/o/r/pull/12"}},
            "head": {"label": "octocat:fix-login"},
        },
        {
            "number": 15,
            "title": "Refactor",
            "diff_url": "https://github.com/o/r/pull/15.diff",
            "html_url": "https://github.com/o/r/pull/15",
            "_links": {"html": {"href": "https://github.com/o/r/pull/15"}},
            "head": {"label": "hubot:refactor"},
        },
    ]


@pytest.fixture
def netrc_file(tmp_path: Path) -> Path:
    path = tmp_path / "netrc"
    path.write_text("machine api.github.com\n  login octocat\n  password s3cret\n")
    path.chmod(0o600)
    return path
