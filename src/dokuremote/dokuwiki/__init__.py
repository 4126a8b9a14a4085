"""DokuWiki integration for dokuremote.

This package provides the XML-RPC transport and the DokuWiki API client.
"""

from .client import DokuWikiClient, PageInfoDict, PutPageOptionsDict
from .transport import XmlRpcTransport, create_http_client

__all__ = [
    'DokuWikiClient',
    'PageInfoDict',
    'PutPageOptionsDict',
    'XmlRpcTransport',
    'create_http_client',
]
