"""DokuWiki XML-RPC client.

This module wraps the remote procedures dokuremote needs in typed methods
and handles authentication: a call that fails for lack of a login triggers
one login through the credential provider and one retry.
"""

import logging
from collections.abc import Sequence
from typing import Any, NotRequired, TypedDict

from dokuremote.credentials import CredentialProvider
from dokuremote.dokuwiki.transport import XmlRpcTransport
from dokuremote.errors import AuthenticationError, AuthorizationRequired, RemoteRejection

logger = logging.getLogger(__name__)


class PageInfoDict(TypedDict):
    """Record returned by wiki.getAllPages."""

    id: str
    rev: NotRequired[int]
    mtime: NotRequired[int]
    size: NotRequired[int]
    perms: NotRequired[int]


class PutPageOptionsDict(TypedDict):
    """Options accepted by wiki.putPage."""

    sum: str
    minor: bool


class DokuWikiClient:
    """Synchronous client for the DokuWiki XML-RPC API."""

    def __init__(
        self, transport: XmlRpcTransport, credentials: CredentialProvider
    ) -> None:
        """Initialize DokuWiki client.

        Args:
            transport: XML-RPC transport bound to the wiki endpoint
            credentials: Source of login credentials
        """
        self.transport = transport
        self.credentials = credentials

    def call(self, method: str, args: Sequence[Any] = ()) -> Any:
        """Call a remote method, logging in and retrying once if required.

        Args:
            method: Remote method name
            args: Positional arguments

        Returns:
            Decoded result

        Raises:
            AuthenticationError: If the login triggered by the call fails
            AuthorizationRequired: If the call is still unauthorized after login
            TransportError: On network failures (no login attempt)
            RemoteRejection: If the wiki rejects the call (no login attempt)
        """
        params = tuple(args)
        try:
            return self.transport.request(method, params)
        except AuthorizationRequired:
            logger.info(f"{method} requires authentication, logging in")
            self.authenticate()

        return self.transport.request(method, params)

    def authenticate(self) -> None:
        """Log in with credentials from the provider.

        Raises:
            AuthenticationError: If the wiki refuses the credentials
        """
        creds = self.credentials.get(self.transport.host, self.transport.port)
        try:
            ok = self.login(creds.principal, creds.reveal())
        except AuthorizationRequired as err:
            raise AuthenticationError(
                f"Login as {creds.principal} was rejected: {err}"
            ) from err
        if not ok:
            raise AuthenticationError(f"Login as {creds.principal} failed")
        logger.info(f"Logged in as {creds.principal}")

    def login(self, user: str, password: str) -> bool:
        """Call dokuwiki.login.

        Args:
            user: Login name
            password: Password

        Returns:
            True if the wiki accepted the credentials
        """
        return bool(self.transport.request("dokuwiki.login", (user, password)))

    def get_title(self) -> str:
        """Get the wiki title."""
        return str(self.call("dokuwiki.getTitle"))

    def get_page(self, page_id: str) -> str:
        """Get raw wiki text of a page.

        Args:
            page_id: Page identifier

        Returns:
            Page text, empty if the page does not exist
        """
        logger.info(f"Getting page {page_id}")
        text = self.call("wiki.getPage", [page_id])
        return text or ""

    def put_page(
        self, page_id: str, content: str, summary: str, minor: bool = False
    ) -> bool:
        """Save raw wiki text of a page.

        Saving empty content deletes the page.

        Args:
            page_id: Page identifier
            content: New wiki text
            summary: Edit summary
            minor: Mark as minor edit

        Returns:
            True

        Raises:
            RemoteRejection: If the wiki reports the save as unsuccessful
        """
        options: PutPageOptionsDict = {"sum": summary, "minor": minor}
        logger.info(f"Saving page {page_id}")
        logger.debug(f"Save options: {options}")
        if not self.call("wiki.putPage", [page_id, content, options]):
            raise RemoteRejection(f"Page {page_id} was not saved")
        return True

    def get_all_pages(self) -> list[PageInfoDict]:
        """List all pages on the wiki."""
        pages: list[PageInfoDict] = self.call("wiki.getAllPages") or []
        logger.info(f"Found {len(pages)} pages")
        return pages

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()
