"""Shared test fixtures."""

import httpx
import pytest

from dokuremote.credentials import CredentialProvider
from dokuremote.dokuwiki import DokuWikiClient, XmlRpcTransport
from tests.fakes import WIKI_URL, FakeWiki, fake_prompt


@pytest.fixture
def fake_wiki() -> FakeWiki:
    """Wiki with a few pages across namespaces."""
    return FakeWiki(
        pages={
            "start": "Welcome",
            "proj:a": "Page A",
            "proj:b": "Page B",
        },
    )


@pytest.fixture
def transport(fake_wiki: FakeWiki) -> XmlRpcTransport:
    """Transport routed to the fake wiki."""
    http_client = httpx.Client(transport=httpx.MockTransport(fake_wiki))
    return XmlRpcTransport(WIKI_URL, http_client)


@pytest.fixture
def credentials() -> CredentialProvider:
    """Credential provider that answers prompts with valid credentials."""
    return CredentialProvider(prompt=fake_prompt)


@pytest.fixture
def client(transport: XmlRpcTransport, credentials: CredentialProvider) -> DokuWikiClient:
    """DokuWiki client talking to the fake wiki."""
    return DokuWikiClient(transport, credentials)
