"""Wiki editing session.

A session owns the DokuWiki client, the page cache and the completion
provider, and implements the commands an editor front-end binds to keys:
open, save, list, link insertion and following links.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import click

from dokuremote.cache import PageCache
from dokuremote.completion import CompletionProvider
from dokuremote.config import DEFAULT_SAVE_SUMMARY, Config
from dokuremote.credentials import CredentialProvider, NetrcLookup
from dokuremote.dokuwiki import DokuWikiClient, XmlRpcTransport, create_http_client
from dokuremote.paths import link_at, namespace_of, resolve, sanitize_page_name
from dokuremote.types import PageId

logger = logging.getLogger(__name__)


@dataclass
class PageBuffer:
    """A page opened for editing.

    ``saved_text`` is the text last known to be on the wiki; it only changes
    when a save succeeds.
    """

    page_id: PageId
    text: str
    saved_text: str
    is_new: bool = False

    @property
    def modified(self) -> bool:
        """Whether the text differs from the saved text, ignoring trailing whitespace."""
        return self.text.rstrip() != self.saved_text.rstrip()


class WikiSession:
    """Editing session against one wiki."""

    def __init__(
        self,
        client: DokuWikiClient,
        save_summary: str = DEFAULT_SAVE_SUMMARY,
        minor: bool = False,
    ) -> None:
        """Initialize session.

        Args:
            client: DokuWiki client
            save_summary: Edit summary used when none is given
            minor: Default minor-edit flag
        """
        self.client = client
        self.cache = PageCache(client)
        self.completion = CompletionProvider(self.cache)
        self.save_summary = save_summary
        self.minor = minor
        self._needs_refresh = False

    @classmethod
    def from_config(
        cls, config: Config, prompt: Callable[..., Any] = click.prompt
    ) -> "WikiSession":
        """Create a session from configuration.

        Args:
            config: Application config
            prompt: Prompt used when no stored credentials match

        Returns:
            WikiSession connected to the configured endpoint

        Raises:
            ConfigurationError: If wiki.xml_rpc_url is not set
        """
        url = config.require_xml_rpc_url()
        transport = XmlRpcTransport(url, create_http_client(config.wiki.timeout))
        credentials = CredentialProvider(
            [NetrcLookup(config.credentials.netrc_files)],
            default_principal=config.wiki.login_user,
            prompt=prompt,
        )
        return cls(
            DokuWikiClient(transport, credentials),
            save_summary=config.editing.save_summary,
            minor=config.editing.minor,
        )

    def __enter__(self) -> "WikiSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP connection."""
        self.client.close()

    def login(self) -> None:
        """Log in explicitly.

        Raises:
            AuthenticationError: If the wiki refuses the credentials
        """
        self.client.authenticate()

    def title(self) -> str:
        """Get the wiki title."""
        return self.client.get_title()

    def resolve_name(self, raw_name: str, current_page: str | None = None) -> PageId:
        """Turn a typed page name into a page identifier.

        Args:
            raw_name: Name as typed, relative to ``current_page``
            current_page: Page the user is on, if any

        Returns:
            Page identifier

        Raises:
            InvalidPath: If the name cannot be resolved
        """
        namespace = namespace_of(current_page) if current_page else ""
        return resolve(sanitize_page_name(raw_name), namespace)

    def open_page(self, raw_name: str, current_page: str | None = None) -> PageBuffer:
        """Fetch a page for editing.

        A page that does not exist yet opens as an empty new buffer.

        Args:
            raw_name: Name as typed, relative to ``current_page``
            current_page: Page the user is on, if any

        Returns:
            Buffer holding the page text
        """
        return self._fetch(self.resolve_name(raw_name, current_page))

    def _fetch(self, page_id: PageId) -> PageBuffer:
        text = self.client.get_page(page_id)
        if not text:
            logger.info(f"Page {page_id} does not exist, creating new page")
            return PageBuffer(page_id, "", "", is_new=True)
        return PageBuffer(page_id, text, text)

    def follow_link(self, line: str, column: int, current_page: str) -> PageBuffer | None:
        """Open the page linked under the cursor.

        Args:
            line: Text of the current line
            column: Cursor offset into the line
            current_page: Page the line belongs to

        Returns:
            Buffer for the linked page, or None if the cursor is not on a
            page link
        """
        target = link_at(line, column)
        if target is None:
            return None
        return self._fetch(resolve(target, namespace_of(current_page)))

    def save_page(
        self,
        buffer: PageBuffer,
        summary: str | None = None,
        minor: bool | None = None,
    ) -> bool:
        """Save a buffer to the wiki.

        Saving an existing page with empty text deletes it. Without a summary
        the configured default is used and the edit is marked minor unless
        ``minor`` says otherwise.

        Args:
            buffer: Buffer to save
            summary: Edit summary
            minor: Minor-edit flag, default from configuration

        Returns:
            True if the page was written, False if there was nothing to save

        Raises:
            DokuRemoteError: If the save fails; the buffer stays unsaved
        """
        if not buffer.modified:
            logger.info(f"No unsaved changes in {buffer.page_id}")
            return False

        if not summary:
            summary = self.save_summary
            if minor is None:
                minor = True
        if minor is None:
            minor = self.minor

        self.client.put_page(buffer.page_id, buffer.text, summary, minor)

        deleted = not buffer.text.strip()
        if deleted:
            logger.info(f"Page {buffer.page_id} removed")
        if deleted or buffer.is_new:
            self._needs_refresh = True
        buffer.saved_text = buffer.text
        buffer.is_new = deleted
        return True

    def list_pages(self, refresh: bool = False) -> tuple[PageId, ...]:
        """List wiki pages, refreshing after pages were created or removed."""
        pages = self.cache.list(refresh or self._needs_refresh)
        self._needs_refresh = False
        return pages

    def insert_link(self, page_id: str) -> str:
        """Link text for a page chosen from the page list."""
        return self.completion.choose(page_id)
