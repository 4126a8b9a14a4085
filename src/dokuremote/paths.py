"""Page identifier resolution.

Maps the link syntax users type (bare names, ``.:relative``, ``:absolute``,
``::escaped``) onto canonical DokuWiki page identifiers. Everything here is
pure string manipulation with no I/O.
"""

import re

from dokuremote.errors import InvalidPath
from dokuremote.types import PageId

LINK_OPEN = "[["
LINK_CLOSE = "]]"

# First character of a fully qualified path
_QUALIFIED_HEAD = re.compile(r"[a-z0-9]")

# Opening link syntax left of the cursor, closing link syntax right of it
_LINK_LEFT = re.compile(r"\[\[[^\]]*$")
_LINK_RIGHT = re.compile(r"^[^\[]*\]\]")


def resolve(raw_path: str, current_namespace: str) -> PageId:
    """Resolve a raw link into a page identifier.

    Rules, first match wins:

    1. ``::name`` is an escaped absolute link; one colon is stripped.
    2. ``:name`` (including a lone ``:``) is already absolute.
    3. A path containing a colon is either parent-relative (``.:name``),
       fully qualified (starts with a lowercase letter or digit), or invalid.
    4. A bare name lives in the current namespace.

    An empty ``current_namespace`` means the top level: relative names resolve
    to the bare remainder rather than gaining a leading colon.

    Args:
        raw_path: Link text as typed (e.g. ``".:notes"``)
        current_namespace: Namespace of the page the link appears on

    Returns:
        Canonical page identifier

    Raises:
        InvalidPath: If the path uses colons without a recognized prefix
    """
    if raw_path.startswith("::"):
        return PageId(raw_path[1:])
    if raw_path.startswith(":"):
        return PageId(raw_path)
    if ":" in raw_path:
        if raw_path.startswith(".:"):
            return _join(current_namespace, raw_path[2:])
        if _QUALIFIED_HEAD.match(raw_path):
            return PageId(raw_path)
        raise InvalidPath(raw_path)
    return _join(current_namespace, raw_path)


def _join(namespace: str, name: str) -> PageId:
    if not namespace:
        return PageId(name)
    return PageId(f"{namespace}:{name}")


def namespace_of(page_id: str) -> str:
    """Return the namespace of a page identifier.

    ``"projects:alpha:notes"`` yields ``"projects:alpha"``; top-level pages
    yield ``""``. A leading absolute colon is ignored.
    """
    return page_id.lstrip(":").rpartition(":")[0]


def sanitize_page_name(raw: str) -> str:
    """Normalize the spacing of a typed page name.

    Each colon-separated segment is stripped and has its spaces turned into
    underscores. Case is kept, so a name that does not resolve is reported
    rather than rewritten. Colons themselves, including escape and relative
    prefixes, are kept as typed.
    """
    return ":".join(
        segment.strip().replace(" ", "_") for segment in raw.split(":")
    )


def wrap_link(token: str) -> str:
    """Wrap text in link syntax (``[[token]]``)."""
    return f"{LINK_OPEN}{token}{LINK_CLOSE}"


def page_link(page_id: str) -> str:
    """Build an absolute link to a page (``proj:a`` -> ``[[:proj:a]]``)."""
    if not page_id.startswith(":"):
        page_id = f":{page_id}"
    return wrap_link(page_id)


def link_at(line: str, column: int) -> str | None:
    """Extract the target of the wiki link surrounding a cursor position.

    Titles (``|title``) and anchors (``#section``) are dropped and slashes
    are treated as namespace separators. External, interwiki and Windows
    share links are not page links.

    Args:
        line: Full text of the line
        column: Cursor offset into the line

    Returns:
        Raw link target suitable for ``resolve``, or None if the cursor is
        not inside a page link
    """
    left = _LINK_LEFT.search(line[:column])
    right = _LINK_RIGHT.search(line[column:])
    if left is None or right is None:
        return None

    target = (left.group() + right.group()).strip("[]")
    target = target.split("|", 1)[0].split("#", 1)[0].strip()
    if not target:
        return None
    if ">" in target or "://" in target or "\\" in target:
        return None
    return target.replace("/", ":")
