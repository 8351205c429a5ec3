"""Credential lookup from a .netrc file."""

from __future__ import annotations

import netrc
from dataclasses import dataclass
from pathlib import Path

from prfiles.exceptions import ConfigError, CredentialFileMissingError, CredentialMissingError

DEFAULT_MACHINE = "api.github.com"


@dataclass(frozen=True)
class Credentials:
    login: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(login={self.login!r}, token='***')"


def load_netrc_credentials(path: str | Path, machine: str = DEFAULT_MACHINE) -> Credentials:
    """Read the login/token pair for `machine` from the netrc file at `path`."""
    netrc_path = Path(path).expanduser()
    if not netrc_path.is_file():
        raise CredentialFileMissingError(str(netrc_path))

    try:
        auth = netrc.netrc(str(netrc_path)).authenticators(machine)
    except netrc.NetrcParseError as e:
        raise ConfigError(f"Could not parse {netrc_path}: {e}") from e

    if auth is None:
        raise CredentialMissingError(str(netrc_path), machine)

    login, _account, password = auth
    return Credentials(login=login or "", token=password or "")
