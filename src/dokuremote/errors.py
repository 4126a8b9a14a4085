"""Error types raised by dokuremote.

Every failure surfaced to a command is one of these. Only the login-retry
point in the RPC client recovers from any of them; everything else
propagates to the command boundary.
"""


class DokuRemoteError(Exception):
    """Base class for all dokuremote errors."""


class ConfigurationError(DokuRemoteError):
    """A required setting (e.g. the XML-RPC endpoint) is missing or invalid."""


class AuthenticationError(DokuRemoteError):
    """Login returned a falsy result or the credentials were rejected."""


class TransportError(DokuRemoteError):
    """Network or HTTP-level failure talking to the wiki."""


class AuthorizationRequired(TransportError):
    """The current session lacks valid credentials (HTTP 401 or equivalent)."""


class RemoteRejection(DokuRemoteError):
    """The call reached the wiki but the wiki refused it.

    Attributes:
        fault_code: XML-RPC fault code, if the rejection came from a fault
    """

    def __init__(self, message: str, fault_code: int | None = None) -> None:
        super().__init__(message)
        self.fault_code = fault_code


class InvalidPath(DokuRemoteError, ValueError):
    """A raw link could not be resolved to a page identifier.

    Attributes:
        path: The offending raw link string
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Invalid page path: {path!r}")
        self.path = path
