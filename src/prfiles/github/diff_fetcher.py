"""Diff fetcher - download raw diff text, following redirects.

GitHub serves `.diff` URLs of pull requests through one or more redirects
(github.com -> patch-diff.githubusercontent.com). Redirects are followed by
hand so the chain length can be bounded and every status outside 2xx/3xx is
surfaced as an `HTTPFetchError`.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import requests

from prfiles.config import FetchConfig
from prfiles.exceptions import FetchError, HTTPFetchError, TooManyRedirectsError

logger = logging.getLogger(__name__)

DEFAULT_MAX_REDIRECTS = 10
DEFAULT_TIMEOUT = 30.0


class DiffFetcher:
    """Fetch the body of a diff URL over HTTP(S)."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.max_redirects = max_redirects
        self.timeout = timeout
        self.headers = dict(headers or {})

    @classmethod
    def from_config(
        cls, config: FetchConfig, session: requests.Session | None = None
    ) -> DiffFetcher:
        return cls(
            session,
            max_redirects=config.max_redirects,
            timeout=config.timeout,
            headers={"User-Agent": config.user_agent},
        )

    def fetch(self, url: str) -> str:
        """Return the diff text served at `url`.

        Raises:
            HTTPFetchError: the server answered with a status that is neither
                success nor a usable redirect.
            TooManyRedirectsError: more than `max_redirects` hops were needed.
            FetchError: the request failed at the transport level.
        """
        history: list[str] = []
        current = url

        while True:
            response = self._get(current)
            status = response.status_code

            if 200 <= status < 300:
                logger.debug("Fetched %s (%d bytes)", current, len(response.content))
                return response.content.decode("utf-8", errors="replace")

            location = response.headers.get("Location")
            if 300 <= status < 400 and location:
                history.append(current)
                if len(history) > self.max_redirects:
                    raise TooManyRedirectsError(url, self.max_redirects, history)
                current = urljoin(current, location)
                logger.debug("Redirect %d -> %s", status, current)
                continue

            raise HTTPFetchError(current, status, response.reason or "")

    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(
                url,
                headers=self.headers,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}") from e

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> DiffFetcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
