"""File index - the inverse of "pull request P changed file F".

`build_file_index` folds a list of pull requests into a `FileIndex` mapping
each touched path to the pull requests that touch it, in listing order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from prfiles.github.pull_request import PullRequest

logger = logging.getLogger(__name__)


@dataclass
class FileEntry:
    """One touched file and the pull requests that touch it."""
    path: str
    pull_requests: list[PullRequest] = field(default_factory=list)

    def add(self, pull_request: PullRequest) -> None:
        self.pull_requests.append(pull_request)

    @property
    def count(self) -> int:
        return len(self.pull_requests)


class FileIndex:
    """Insertion-ordered mapping of path -> FileEntry."""

    def __init__(self) -> None:
        self._entries: dict[str, FileEntry] = {}

    def get_or_create(self, path: str) -> FileEntry:
        entry = self._entries.get(path)
        if entry is None:
            entry = FileEntry(path)
            self._entries[path] = entry
        return entry

    def __getitem__(self, path: str) -> FileEntry:
        return self._entries[path]

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[tuple[str, FileEntry]]:
        return iter(self._entries.items())

    def entries(self) -> list[FileEntry]:
        return list(self._entries.values())

    def filter(self, paths: Iterable[str]) -> FileIndex:
        """New index holding only `paths` that are present, in index order."""
        wanted = set(paths)
        filtered = FileIndex()
        for path, entry in self._entries.items():
            if path in wanted:
                filtered._entries[path] = entry
        return filtered

    def to_dict(self) -> dict[str, list[tuple[str, str]]]:
        """Path -> [(branch_label, html_url), ...] for renderers."""
        return {
            path: [(pr.branch_label, pr.html_url) for pr in entry.pull_requests]
            for path, entry in self._entries.items()
        }


def build_file_index(
    pull_requests: Sequence[PullRequest], workers: int = 1
) -> FileIndex:
    """Build the file index for `pull_requests`.

    Any failure while resolving a pull request's changed files aborts the
    whole build. With `workers > 1` the diffs are fetched on a thread pool,
    but results are still folded in listing order by this thread alone, so
    the index is the same as a sequential build.
    """
    if workers > 1 and len(pull_requests) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(pr.changed_files) for pr in pull_requests]
            try:
                results = [(pr, future.result()) for pr, future in zip(pull_requests, futures)]
            except BaseException:
                # Queued fetches are dropped; only running ones finish.
                for future in futures:
                    future.cancel()
                raise
    else:
        results = ((pr, pr.changed_files()) for pr in pull_requests)

    index = FileIndex()
    for pr, paths in results:
        for path in paths:
            index.get_or_create(path).add(pr)

    logger.info(
        "Indexed %d file(s) across %d pull request(s)", len(index), len(pull_requests)
    )
    return index
