"""XML-RPC over httpx.

Request and response bodies are encoded with ``xmlrpc.client``; the HTTP
exchange goes through a plain ``httpx.Client`` so session cookies set by
``dokuwiki.login`` are kept in its cookie jar and reused by later calls.
"""

import logging
import re
import xmlrpc.client
from typing import Any
from xml.parsers.expat import ExpatError

import httpx

from dokuremote.errors import AuthorizationRequired, RemoteRejection, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "dokuremote"

_UNAUTHORIZED_TEXT = re.compile(
    r"\b(?:not authori[sz]ed|unauthori[sz]ed)\b", re.IGNORECASE
)


def create_http_client(timeout: float = 30.0) -> httpx.Client:
    """Create the HTTP client used for XML-RPC requests.

    No HTTP-level authentication is installed: logging in is handled by the
    RPC client through ``dokuwiki.login``, so the transport must never answer
    a 401 challenge on its own.

    Args:
        timeout: Request timeout in seconds

    Returns:
        httpx Client with an empty cookie jar
    """
    return httpx.Client(
        auth=None,
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def is_unauthorized_fault(fault: xmlrpc.client.Fault) -> bool:
    """Check whether an XML-RPC fault signals a missing or expired login."""
    if fault.faultCode == 401:
        return True
    return _UNAUTHORIZED_TEXT.search(str(fault.faultString)) is not None


class XmlRpcTransport:
    """Sends XML-RPC method calls to a single endpoint."""

    def __init__(self, url: str, client: httpx.Client) -> None:
        """Initialize transport.

        Args:
            url: XML-RPC endpoint (e.g. https://wiki.example.com/lib/exe/xmlrpc.php)
            client: HTTP client, see ``create_http_client``
        """
        self.url = url
        self.client = client
        parsed = httpx.URL(url)
        self.host = parsed.host
        self.port = parsed.port or (443 if parsed.scheme == "https" else 80)

    def request(self, method: str, params: tuple[Any, ...]) -> Any:
        """Call a remote method and return its decoded result.

        Args:
            method: Remote method name (e.g. "wiki.getPage")
            params: Positional arguments

        Returns:
            Decoded XML-RPC return value

        Raises:
            AuthorizationRequired: On HTTP 401 or an unauthorized fault
            RemoteRejection: On any other XML-RPC fault
            TransportError: On connection, HTTP or decoding failures
        """
        body = xmlrpc.client.dumps(params, methodname=method, allow_none=True)
        logger.debug(f"Calling {method} at {self.url}")

        try:
            response = self.client.post(
                self.url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/xml; charset=utf-8"},
            )
        except httpx.HTTPError as err:
            raise TransportError(f"{method} failed: {err}") from err

        if response.status_code == 401:
            raise AuthorizationRequired(f"{method}: HTTP 401 Unauthorized")
        if response.status_code >= 400:
            logger.error(f"Error response: {response.text}")
            raise TransportError(f"{method} failed: HTTP {response.status_code}")

        try:
            result, _ = xmlrpc.client.loads(response.content, use_builtin_types=True)
        except xmlrpc.client.Fault as fault:
            if is_unauthorized_fault(fault):
                raise AuthorizationRequired(f"{method}: {fault.faultString}") from fault
            raise RemoteRejection(
                f"{method}: {fault.faultString}", fault_code=fault.faultCode
            ) from fault
        except (xmlrpc.client.ResponseError, ExpatError) as err:
            raise TransportError(f"{method}: malformed response: {err}") from err

        return result[0] if result else None

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()
