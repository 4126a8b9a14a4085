"""Credential lookup for wiki logins.

Credentials are looked up per host/port in netrc-format files (``~/.authinfo``
or ``~/.netrc``). When nothing matches, the user is prompted for a login and a
masked password. Credentials are only held for the duration of one login
attempt and never written anywhere.
"""

import logging
import netrc
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Protocol

import click

from dokuremote.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_NETRC_FILES = (Path("~/.authinfo"), Path("~/.netrc"))


@dataclass(frozen=True)
class Credentials:
    """Login pair for a wiki.

    ``secret`` may be deferred as a zero-argument callable, which is only
    invoked when the password is actually sent.
    """

    principal: str
    secret: str | Callable[[], str]

    def reveal(self) -> str:
        """Materialize the secret."""
        if callable(self.secret):
            return self.secret()
        return self.secret


class CredentialLookup(Protocol):
    """Find stored credentials for a host."""

    def __call__(self, host: str, port: int | None) -> Credentials | None: ...


class NetrcLookup:
    """Look up credentials in netrc-format files.

    Entries may name the machine as ``host:port`` or just ``host``; the
    port-qualified entry wins. The password is read again from the file
    when it is revealed.
    """

    def __init__(self, paths: Sequence[Path] = DEFAULT_NETRC_FILES) -> None:
        self.paths = [path.expanduser() for path in paths]

    def __call__(self, host: str, port: int | None) -> Credentials | None:
        machines = [f"{host}:{port}", host] if port is not None else [host]
        for path in self.paths:
            if not path.exists():
                continue
            entries = _parse_netrc(path)
            for machine in machines:
                auth = entries.authenticators(machine)
                if auth is None:
                    continue
                login = auth[0]
                if not login:
                    continue
                logger.debug(f"Found credentials for {machine} in {path}")
                return Credentials(login, partial(_read_password, path, machine))
        return None


def _parse_netrc(path: Path) -> netrc.netrc:
    try:
        return netrc.netrc(str(path))
    except netrc.NetrcParseError as err:
        raise ConfigurationError(f"Cannot parse {path}: {err}") from err


def _read_password(path: Path, machine: str) -> str:
    auth = _parse_netrc(path).authenticators(machine)
    if auth is None:
        raise ConfigurationError(f"Entry for {machine} disappeared from {path}")
    return auth[2]


class CredentialProvider:
    """Obtain credentials for a host, prompting when no stored entry exists."""

    def __init__(
        self,
        lookups: Sequence[CredentialLookup] = (),
        default_principal: str | None = None,
        prompt: Callable[..., Any] = click.prompt,
    ) -> None:
        """Initialize provider.

        Args:
            lookups: Stored credential sources, tried in order
            default_principal: Login name offered when prompting
            prompt: Prompt function with ``click.prompt``'s signature
        """
        self.lookups = list(lookups)
        self.default_principal = default_principal
        self.prompt = prompt

    def get(self, host: str, port: int | None = None) -> Credentials:
        """Return credentials for a host.

        Args:
            host: Wiki host name
            port: Wiki port, if known

        Returns:
            Stored credentials, or credentials entered at the prompt
        """
        for lookup in self.lookups:
            found = lookup(host, port)
            if found is not None:
                return found

        logger.info(f"No stored credentials for {host}, prompting")
        principal = self.prompt(f"Login for {host}", default=self.default_principal)
        secret = self.prompt(f"Password for {principal}@{host}", hide_input=True)
        return Credentials(str(principal), str(secret))
