"""Tests for PullRequest and its descriptor."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from prfiles.exceptions import HTTPFetchError, PayloadError
from prfiles.github.diff_fetcher import DiffFetcher
from prfiles.github.pull_request import PullRequest, PullRequestDescriptor

from conftest import git_diff_section, make_response, make_session

DESCRIPTOR = PullRequestDescriptor(
    diff_url="https://github.com/o/r/pull/7.diff",
    html_url="https://github.com/o/r/pull/7",
    branch_label="octocat:feature",
    number=7,
)


class TestDescriptor:
    def test_from_api(self, pulls_payload):
        d = PullRequestDescriptor.from_api(pulls_payload[0])
        assert d.diff_url == "https://github.com/o/r/pull/12.diff"
        assert d.html_url == "https://github.com/o/r/pull/12"
        assert d.branch_label == "octocat:fix-login"
        assert d.number == 12
        assert d.title == "Fix login"

    def test_from_api_falls_back_to_html_url(self, pulls_payload):
        payload = dict(pulls_payload[0])
        del payload["_links"]
        assert PullRequestDescriptor.from_api(payload).html_url == payload["html_url"]

    def test_from_api_missing_head(self, pulls_payload):
        payload = dict(pulls_payload[0])
        del payload["head"]
        with pytest.raises(PayloadError):
            PullRequestDescriptor.from_api(payload)

    def test_descriptor_is_immutable(self):
        with pytest.raises(AttributeError):
            DESCRIPTOR.branch_label = "other"


class TestChangedFiles:
    def test_fetches_and_parses(self):
        fetcher = Mock()
        fetcher.fetch.return_value = git_diff_section("a.txt") + git_diff_section("b/c.txt")
        pr = PullRequest(DESCRIPTOR, fetcher)

        assert pr.changed_files() == ["a.txt", "b/c.txt"]
        fetcher.fetch.assert_called_once_with(DESCRIPTOR.diff_url)

    def test_memoized(self):
        fetcher = Mock()
        fetcher.fetch.return_value = git_diff_section("a.txt")
        pr = PullRequest(DESCRIPTOR, fetcher)

        first = pr.changed_files()
        second = pr.changed_files()

        assert first == second == ["a.txt"]
        assert fetcher.fetch.call_count == 1

    def test_snapshot_ignores_later_changes(self):
        fetcher = Mock()
        fetcher.fetch.side_effect = [git_diff_section("a.txt"), git_diff_section("z.txt")]
        pr = PullRequest(DESCRIPTOR, fetcher)
        pr.changed_files()
        assert pr.changed_files() == ["a.txt"]

    def test_empty_diff(self):
        fetcher = Mock()
        fetcher.fetch.return_value = ""
        assert PullRequest(DESCRIPTOR, fetcher).changed_files() == []

    def test_http_error_propagates(self):
        session = make_session({DESCRIPTOR.diff_url: make_response(404, reason="Not Found")})
        pr = PullRequest(DESCRIPTOR, DiffFetcher(session))

        with pytest.raises(HTTPFetchError) as exc:
            pr.changed_files()
        assert exc.value.status_code == 404

    def test_failure_is_not_cached(self):
        fetcher = Mock()
        fetcher.fetch.side_effect = [HTTPFetchError(DESCRIPTOR.diff_url, 502), git_diff_section("a.txt")]
        pr = PullRequest(DESCRIPTOR, fetcher)

        with pytest.raises(HTTPFetchError):
            pr.changed_files()
        assert pr.changed_files() == ["a.txt"]

    def test_redirected_diff(self):
        final = "https://patch-diff.githubusercontent.com/raw/o/r/pull/7.diff"
        session = make_session({
            DESCRIPTOR.diff_url: make_response(302, headers={"Location": final}),
            final: make_response(200, git_diff_section("lib/x.py")),
        })
        pr = PullRequest(DESCRIPTOR, DiffFetcher(session))
        assert pr.changed_files() == ["lib/x.py"]

    def test_accessors(self):
        pr = PullRequest(DESCRIPTOR, Mock())
        assert pr.branch_label == "octocat:feature"
        assert pr.html_url == "https://github.com/o/r/pull/7"
        assert pr.diff_url == "https://github.com/o/r/pull/7.diff"
        assert pr.number == 7
        assert "octocat:feature" in repr(pr)

    def test_fetcher_is_required(self):
        with pytest.raises(TypeError):
            PullRequest(DESCRIPTOR)
