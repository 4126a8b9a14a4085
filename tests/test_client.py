"""Tests for the DokuWiki client and its login-and-retry behavior."""

import httpx
import pytest

from dokuremote.credentials import CredentialProvider, Credentials
from dokuremote.dokuwiki import DokuWikiClient, XmlRpcTransport
from dokuremote.errors import (
    AuthenticationError,
    AuthorizationRequired,
    RemoteRejection,
    TransportError,
)
from tests.fakes import WIKI_URL, FakeWiki, fake_prompt, xmlrpc_fault, xmlrpc_response


def _client(wiki: FakeWiki, provider: CredentialProvider | None = None) -> DokuWikiClient:
    transport = XmlRpcTransport(WIKI_URL, httpx.Client(transport=httpx.MockTransport(wiki)))
    return DokuWikiClient(transport, provider or CredentialProvider(prompt=fake_prompt))


class TestCallRetry:
    """Tests for DokuWikiClient.call()."""

    def test__unauthorized__logs_in_once_and_retries_once(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Log in after an unauthorized fault and retry the call."""
        result = client.call("dokuwiki.getTitle")

        assert result == "Test Wiki"
        assert fake_wiki.calls == ["dokuwiki.getTitle", "dokuwiki.login", "dokuwiki.getTitle"]

    def test__http_401__logs_in_once_and_retries_once(self) -> None:
        """Treat HTTP 401 the same as an unauthorized fault."""
        wiki = FakeWiki(unauthorized="http")
        client = _client(wiki)

        assert client.call("dokuwiki.getTitle") == "Test Wiki"
        assert wiki.calls == ["dokuwiki.getTitle", "dokuwiki.login", "dokuwiki.getTitle"]

    def test__after_login__session_is_reused(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Reuse the session cookie without logging in again."""
        client.call("dokuwiki.getTitle")
        fake_wiki.calls.clear()

        client.call("wiki.getPage", ["start"])

        assert fake_wiki.calls == ["wiki.getPage"]

    def test__other_fault__no_login_attempt(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Propagate application faults without logging in."""
        fake_wiki.failures["wiki.putPage"] = xmlrpc_fault(133, "The page is currently locked")

        with pytest.raises(RemoteRejection):
            client.call("wiki.putPage", ["start", "text", {"sum": "", "minor": False}])

        assert "dokuwiki.login" not in fake_wiki.calls
        assert fake_wiki.calls == ["wiki.putPage"]

    def test__fault_text_with_digits__no_login_attempt(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Do not mistake digits in an application fault for a 401."""
        fake_wiki.failures["wiki.putPage"] = xmlrpc_fault(133, "Page locked by user4015")

        with pytest.raises(RemoteRejection) as exc_info:
            client.call("wiki.putPage", ["start", "text", {"sum": "", "minor": False}])

        assert exc_info.value.fault_code == 133
        assert fake_wiki.calls == ["wiki.putPage"]

    def test__network_error__no_login_attempt(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Propagate transport failures without logging in."""
        fake_wiki.failures["dokuwiki.getTitle"] = httpx.ConnectError("unauthorized network")

        with pytest.raises(TransportError) as exc_info:
            client.call("dokuwiki.getTitle")

        assert not isinstance(exc_info.value, AuthorizationRequired)
        assert fake_wiki.calls == ["dokuwiki.getTitle"]

    def test__login_rejected__raises_authentication_error(self) -> None:
        """Raise AuthenticationError and do not retry when login is refused."""
        wiki = FakeWiki(password="other")
        client = _client(wiki)

        with pytest.raises(AuthenticationError):
            client.call("dokuwiki.getTitle")

        assert wiki.calls == ["dokuwiki.getTitle", "dokuwiki.login"]

    def test__retry_still_unauthorized__propagates_without_looping(self) -> None:
        """Propagate the second failure instead of logging in again."""
        wiki = FakeWiki(accept_session=False)
        client = _client(wiki)

        with pytest.raises(AuthorizationRequired):
            client.call("dokuwiki.getTitle")

        assert wiki.calls == ["dokuwiki.getTitle", "dokuwiki.login", "dokuwiki.getTitle"]

    def test__login_transport_failure__propagates(self, fake_wiki: FakeWiki) -> None:
        """Propagate a transport failure raised by the login call itself."""
        fake_wiki.failures["dokuwiki.login"] = httpx.Response(502)
        client = _client(fake_wiki)

        with pytest.raises(TransportError):
            client.call("dokuwiki.getTitle")

        assert fake_wiki.calls == ["dokuwiki.getTitle", "dokuwiki.login"]

    def test__credentials_requested_for_endpoint_host(self, fake_wiki: FakeWiki) -> None:
        """Ask the provider for credentials of the endpoint's host and port."""
        requested: list[tuple[str, int | None]] = []

        def lookup(host: str, port: int | None) -> Credentials:
            requested.append((host, port))
            return Credentials("alice", lambda: "secret")

        client = _client(fake_wiki, CredentialProvider([lookup]))

        client.call("dokuwiki.getTitle")

        assert requested == [("wiki.example.com", 443)]


class TestTypedOperations:
    """Tests for the typed remote operations."""

    def test__get_title(self, client: DokuWikiClient) -> None:
        """Return the wiki title."""
        assert client.get_title() == "Test Wiki"

    def test__get_page__existing(self, client: DokuWikiClient) -> None:
        """Return page text."""
        assert client.get_page("proj:a") == "Page A"

    def test__get_page__missing__returns_empty(self, client: DokuWikiClient) -> None:
        """Return an empty string for missing pages."""
        assert client.get_page("nope") == ""

    def test__put_page__sends_options(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Send summary and minor flag as the options struct."""
        assert client.put_page("proj:c", "New", "created", minor=True) is True

        assert fake_wiki.saves == [("proj:c", "New", {"sum": "created", "minor": True})]
        assert fake_wiki.pages["proj:c"] == "New"

    def test__put_page__falsy_result__raises_remote_rejection(
        self, client: DokuWikiClient, fake_wiki: FakeWiki
    ) -> None:
        """Raise RemoteRejection when the wiki reports the save as failed."""
        client.authenticate()
        fake_wiki.failures["wiki.putPage"] = xmlrpc_response(False)

        with pytest.raises(RemoteRejection):
            client.put_page("start", "text", "summary")

    def test__get_all_pages(self, client: DokuWikiClient) -> None:
        """Return page records in server order."""
        pages = client.get_all_pages()

        assert [page["id"] for page in pages] == ["start", "proj:a", "proj:b"]

    def test__login__wrong_password__returns_false(self, client: DokuWikiClient) -> None:
        """Return False for rejected credentials."""
        assert client.login("alice", "wrong") is False
