"""Custom exceptions for prfiles."""


class PrFilesError(Exception):
    """Base exception for all prfiles errors."""


class ConfigError(PrFilesError):
    """Configuration-related errors."""


class CredentialFileMissingError(ConfigError):
    """Raised when the credentials (.netrc) file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Credentials file not found: {path}")


class CredentialMissingError(ConfigError):
    """Raised when the credentials file has no entry for the API host."""

    def __init__(self, path: str, machine: str):
        self.path = path
        self.machine = machine
        super().__init__(f"No credentials for machine '{machine}' in {path}")


class FetchError(PrFilesError):
    """Diff retrieval errors."""


class HTTPFetchError(FetchError):
    """Raised when a diff URL answers with a non-success, non-redirect status."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"GET {url} failed: {status_code} {reason}".rstrip())


class TooManyRedirectsError(FetchError):
    """Raised when a redirect chain is longer than the configured ceiling."""

    def __init__(self, url: str, max_redirects: int, history: list[str] | None = None):
        self.url = url
        self.max_redirects = max_redirects
        self.history = list(history or [])
        super().__init__(f"Exceeded {max_redirects} redirects while fetching {url}")


class GitHubApiError(PrFilesError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class PayloadError(PrFilesError):
    """Raised when a pull request payload lacks a required field."""
