"""Tests for credential lookup."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dokuremote.credentials import CredentialProvider, Credentials, NetrcLookup
from dokuremote.errors import ConfigurationError


class TestCredentials:
    """Tests for Credentials.reveal()."""

    def test__plain_secret(self) -> None:
        """Return a plain secret as-is."""
        assert Credentials("alice", "secret").reveal() == "secret"

    def test__deferred_secret__called_on_reveal(self) -> None:
        """Materialize a deferred secret only when revealed."""
        secret = MagicMock(return_value="secret")
        creds = Credentials("alice", secret)

        secret.assert_not_called()
        assert creds.reveal() == "secret"
        secret.assert_called_once_with()


class TestNetrcLookup:
    """Tests for NetrcLookup."""

    def test__host_entry__found(self, tmp_path: Path) -> None:
        """Find an entry by host name."""
        netrc_file = tmp_path / "authinfo"
        netrc_file.write_text("machine wiki.example.com login alice password secret\n")

        creds = NetrcLookup([netrc_file])("wiki.example.com", 443)

        assert creds is not None
        assert creds.principal == "alice"
        assert creds.reveal() == "secret"

    def test__port_entry__preferred(self, tmp_path: Path) -> None:
        """Prefer an entry qualified with the port."""
        netrc_file = tmp_path / "authinfo"
        netrc_file.write_text(
            "machine wiki.example.com login alice password secret\n"
            "machine wiki.example.com:8443 login bob password hunter2\n"
        )

        creds = NetrcLookup([netrc_file])("wiki.example.com", 8443)

        assert creds is not None
        assert creds.principal == "bob"
        assert creds.reveal() == "hunter2"

    def test__secret_is_deferred(self, tmp_path: Path) -> None:
        """Read the password from the file when revealed."""
        netrc_file = tmp_path / "authinfo"
        netrc_file.write_text("machine wiki.example.com login alice password old\n")
        creds = NetrcLookup([netrc_file])("wiki.example.com", None)
        netrc_file.write_text("machine wiki.example.com login alice password new\n")

        assert creds is not None
        assert creds.reveal() == "new"

    def test__no_match__returns_none(self, tmp_path: Path) -> None:
        """Return None when no entry matches."""
        netrc_file = tmp_path / "authinfo"
        netrc_file.write_text("machine other.example.com login alice password secret\n")

        assert NetrcLookup([netrc_file])("wiki.example.com", 443) is None

    def test__missing_files__return_none(self, tmp_path: Path) -> None:
        """Skip files that do not exist."""
        assert NetrcLookup([tmp_path / "nope"])("wiki.example.com", 443) is None

    def test__first_file_wins(self, tmp_path: Path) -> None:
        """Search files in order."""
        first = tmp_path / "authinfo"
        second = tmp_path / "netrc"
        first.write_text("machine wiki.example.com login alice password one\n")
        second.write_text("machine wiki.example.com login bob password two\n")

        creds = NetrcLookup([first, second])("wiki.example.com", 443)

        assert creds is not None
        assert creds.principal == "alice"

    def test__unparsable_file__raises_configuration_error(self, tmp_path: Path) -> None:
        """Report a broken credentials file as a configuration problem."""
        netrc_file = tmp_path / "authinfo"
        netrc_file.write_text("machine wiki.example.com login alice bogus secret\n")

        with pytest.raises(ConfigurationError):
            NetrcLookup([netrc_file])("wiki.example.com", 443)


class TestCredentialProvider:
    """Tests for CredentialProvider.get()."""

    def test__lookup_match__no_prompt(self) -> None:
        """Use stored credentials without prompting."""
        prompt = MagicMock()
        stored = Credentials("alice", "secret")
        provider = CredentialProvider([lambda host, port: stored], prompt=prompt)

        assert provider.get("wiki.example.com", 443) is stored
        prompt.assert_not_called()

    def test__lookups_tried_in_order(self) -> None:
        """Fall through lookups that find nothing."""
        stored = Credentials("bob", "secret")
        provider = CredentialProvider(
            [lambda host, port: None, lambda host, port: stored],
            prompt=MagicMock(),
        )

        assert provider.get("wiki.example.com") is stored

    def test__no_match__prompts_with_masked_secret(self) -> None:
        """Prompt for login and a hidden password when nothing is stored."""
        prompt = MagicMock(side_effect=["carol", "pw"])
        provider = CredentialProvider(default_principal="carol", prompt=prompt)

        creds = provider.get("wiki.example.com", 443)

        assert creds == Credentials("carol", "pw")
        first_call, second_call = prompt.call_args_list
        assert first_call.kwargs == {"default": "carol"}
        assert second_call.kwargs == {"hide_input": True}
