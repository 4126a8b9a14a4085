"""In-memory page list cache.

Holds the last complete listing of page identifiers fetched from the wiki.
The snapshot is an immutable tuple replaced in a single assignment, so a
reader sees either the previous listing or the new one, never a mix. A
refresh that fails leaves the previous snapshot in place.
"""

import logging

from dokuremote.dokuwiki import DokuWikiClient
from dokuremote.errors import TransportError
from dokuremote.types import PageId

logger = logging.getLogger(__name__)


class PageCache:
    """Process-lifetime cache of the wiki's page identifiers."""

    def __init__(self, client: DokuWikiClient) -> None:
        """Initialize an empty, unfetched cache.

        Args:
            client: DokuWiki client used for wiki.getAllPages
        """
        self._client = client
        self._pages: tuple[PageId, ...] | None = None

    @property
    def snapshot(self) -> tuple[PageId, ...]:
        """Current snapshot, without any remote call."""
        return self._pages or ()

    @property
    def is_populated(self) -> bool:
        """Whether a listing has been fetched, even an empty one."""
        return self._pages is not None

    def list(self, force_refresh: bool = False) -> tuple[PageId, ...]:
        """Return the page list, fetching it if never fetched or forced.

        Args:
            force_refresh: Fetch a new listing even if one is cached

        Returns:
            Page identifiers in the order the wiki returned them

        Raises:
            TransportError: If a record has no page identifier
            DokuRemoteError: If the listing fails; the old snapshot is kept
        """
        if self._pages is not None and not force_refresh:
            return self._pages

        logger.info("Refreshing page list")
        records = self._client.get_all_pages()
        try:
            pages = tuple(dict.fromkeys(PageId(record["id"]) for record in records))
        except (KeyError, TypeError) as err:
            raise TransportError(f"Malformed wiki.getAllPages record: {err!r}") from err
        self._pages = pages
        logger.debug(f"Cached {len(pages)} page identifiers")
        return pages

    def refresh(self) -> tuple[PageId, ...]:
        """Fetch a new listing unconditionally."""
        return self.list(force_refresh=True)

    def children(self, namespace: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """List direct children of a namespace from the current snapshot.

        Args:
            namespace: Namespace to list, empty for the top level

        Returns:
            Tuple of (sub-namespaces, page names), each sorted, relative to
            ``namespace``
        """
        prefix = f"{namespace.strip(':')}:" if namespace.strip(":") else ""
        namespaces: set[str] = set()
        pages: set[str] = set()
        for page_id in self.snapshot:
            if not page_id.startswith(prefix):
                continue
            rest = page_id[len(prefix) :]
            head, sep, _ = rest.partition(":")
            if sep:
                namespaces.add(head)
            else:
                pages.add(head)
        return tuple(sorted(namespaces)), tuple(sorted(pages))
