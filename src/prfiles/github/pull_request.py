"""Pull request wrapper - lazily resolves the files a pull request changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from prfiles.exceptions import PayloadError
from prfiles.github.diff_fetcher import DiffFetcher
from prfiles.github.diff_parser import UnifiedDiffParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequestDescriptor:
    """The subset of a pull request listing that the report needs."""
    diff_url: str
    html_url: str
    branch_label: str  # "owner:branch"
    number: int | None = None
    title: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> PullRequestDescriptor:
        """Build a descriptor from one item of `GET /repos/{o}/{r}/pulls`."""
        try:
            diff_url = payload["diff_url"]
            html_url = (
                payload.get("_links", {}).get("html", {}).get("href")
                or payload["html_url"]
            )
            branch_label = payload["head"]["label"]
        except (AttributeError, KeyError, TypeError) as e:
            raise PayloadError(f"Pull request payload is missing {e}") from e

        return cls(
            diff_url=diff_url,
            html_url=html_url,
            branch_label=branch_label,
            number=payload.get("number"),
            title=payload.get("title") or "",
        )


class PullRequest:
    """One open pull request and the files its diff touches.

    The diff is fetched on the first `changed_files()` call and the result
    is kept for the lifetime of the instance.
    """

    def __init__(
        self,
        descriptor: PullRequestDescriptor,
        fetcher: DiffFetcher,
        parser: UnifiedDiffParser | None = None,
    ) -> None:
        self.descriptor = descriptor
        self._fetcher = fetcher
        self._parser = parser or UnifiedDiffParser()
        self._changed_files: list[str] | None = None

    @property
    def diff_url(self) -> str:
        return self.descriptor.diff_url

    @property
    def html_url(self) -> str:
        return self.descriptor.html_url

    @property
    def branch_label(self) -> str:
        return self.descriptor.branch_label

    @property
    def number(self) -> int | None:
        return self.descriptor.number

    @property
    def title(self) -> str:
        return self.descriptor.title

    def changed_files(self) -> list[str]:
        """Paths touched by this pull request, in diff order.

        Fetch errors propagate; nothing is cached unless the fetch succeeded.
        """
        if self._changed_files is None:
            self._changed_files = self._fetch_changed_files()
        return self._changed_files

    def _fetch_changed_files(self) -> list[str]:
        logger.debug("Fetching diff for %s from %s", self.branch_label, self.diff_url)
        diff_text = self._fetcher.fetch(self.diff_url)
        patches = self._parser.parse(diff_text)
        logger.debug("%s touches %d file(s)", self.branch_label, len(patches))
        return [patch.path for patch in patches]

    def __repr__(self) -> str:
        return f"PullRequest({self.branch_label!r}, {self.html_url!r})"
