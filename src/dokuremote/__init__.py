"""dokuremote - edit DokuWiki pages over XML-RPC.

Provides page identifier resolution, an XML-RPC client that logs in on
demand, a page list cache and link completion for editor front-ends.
"""

from dokuremote.cache import PageCache
from dokuremote.completion import CompletionProvider, CompletionStatus
from dokuremote.credentials import CredentialProvider, Credentials, NetrcLookup
from dokuremote.dokuwiki import DokuWikiClient, XmlRpcTransport
from dokuremote.errors import (
    AuthenticationError,
    ConfigurationError,
    DokuRemoteError,
    InvalidPath,
    RemoteRejection,
    TransportError,
)
from dokuremote.paths import resolve
from dokuremote.session import PageBuffer, WikiSession

__all__ = [
    "AuthenticationError",
    "CompletionProvider",
    "CompletionStatus",
    "ConfigurationError",
    "CredentialProvider",
    "Credentials",
    "DokuRemoteError",
    "DokuWikiClient",
    "InvalidPath",
    "NetrcLookup",
    "PageBuffer",
    "PageCache",
    "RemoteRejection",
    "TransportError",
    "WikiSession",
    "XmlRpcTransport",
    "resolve",
]
