"""Configuration management for dokuremote.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from dokuremote.errors import ConfigurationError

CONFIG_FILENAME = "dokuremote.toml"

DEFAULT_SAVE_SUMMARY = "Edited remotely"


@dataclass
class WikiConfig:
    """Remote wiki configuration."""

    xml_rpc_url: str | None = None
    login_user: str | None = None
    timeout: float = 30.0


@dataclass
class EditingConfig:
    """Defaults for saving pages."""

    save_summary: str = DEFAULT_SAVE_SUMMARY
    minor: bool = False


@dataclass
class CredentialsConfig:
    """Where stored credentials are looked up."""

    netrc_files: list[Path] = field(
        default_factory=lambda: [Path("~/.authinfo"), Path("~/.netrc")],
    )


@dataclass
class Config:
    """Application configuration."""

    wiki: WikiConfig
    editing: EditingConfig
    credentials: CredentialsConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for dokuremote.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            ConfigurationError: If the explicit file is missing or the
                configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    def require_xml_rpc_url(self) -> str:
        """Return the XML-RPC endpoint.

        Raises:
            ConfigurationError: If wiki.xml_rpc_url is not set
        """
        if not self.wiki.xml_rpc_url:
            raise ConfigurationError(
                f"wiki.xml_rpc_url is not set (add it to {CONFIG_FILENAME} "
                "or pass --url)"
            )
        return self.wiki.xml_rpc_url

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            wiki=WikiConfig(),
            editing=EditingConfig(),
            credentials=CredentialsConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ConfigurationError: If the file is not valid TOML or a value
                has the wrong type
        """
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)

            return cls(
                wiki=cls._parse_wiki(data.get("wiki")),
                editing=cls._parse_editing(data.get("editing")),
                credentials=cls._parse_credentials(
                    data.get("credentials"), path.parent
                ),
                config_path=path,
            )
        except (tomllib.TOMLDecodeError, ValueError) as err:
            raise ConfigurationError(f"{path}: {err}") from err

    @classmethod
    def _parse_wiki(cls, data: object) -> WikiConfig:
        """Parse wiki configuration section.

        Args:
            data: Raw wiki section data

        Returns:
            WikiConfig instance
        """
        if data is None:
            return WikiConfig()

        if not isinstance(data, dict):
            raise ValueError("wiki section must be a dictionary")

        xml_rpc_url = data.get("xml_rpc_url")
        if xml_rpc_url is not None and not isinstance(xml_rpc_url, str):
            raise ValueError("wiki.xml_rpc_url must be a string")

        login_user = data.get("login_user")
        if login_user is not None and not isinstance(login_user, str):
            raise ValueError("wiki.login_user must be a string")

        timeout = data.get("timeout", 30.0)
        if isinstance(timeout, bool) or not isinstance(timeout, int | float):
            raise ValueError("wiki.timeout must be a number")

        return WikiConfig(
            xml_rpc_url=xml_rpc_url,
            login_user=login_user,
            timeout=float(timeout),
        )

    @classmethod
    def _parse_editing(cls, data: object) -> EditingConfig:
        """Parse editing configuration section."""
        if data is None:
            return EditingConfig()

        if not isinstance(data, dict):
            raise ValueError("editing section must be a dictionary")

        save_summary = data.get("save_summary", DEFAULT_SAVE_SUMMARY)
        if not isinstance(save_summary, str):
            raise ValueError("editing.save_summary must be a string")

        minor = data.get("minor", False)
        if not isinstance(minor, bool):
            raise ValueError("editing.minor must be a boolean")

        return EditingConfig(save_summary=save_summary, minor=minor)

    @classmethod
    def _parse_credentials(cls, data: object, config_dir: Path) -> CredentialsConfig:
        """Parse credentials configuration section.

        Args:
            data: Raw credentials section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            CredentialsConfig instance
        """
        if data is None:
            return CredentialsConfig()

        if not isinstance(data, dict):
            raise ValueError("credentials section must be a dictionary")

        netrc_file = data.get("netrc_file")
        if netrc_file is None:
            return CredentialsConfig()
        if not isinstance(netrc_file, str):
            raise ValueError("credentials.netrc_file must be a string")

        return CredentialsConfig(
            netrc_files=[config_dir / Path(netrc_file).expanduser()],
        )

    def with_overrides(
        self,
        *,
        xml_rpc_url: str | None = None,
        login_user: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config.

        Args:
            xml_rpc_url: Override wiki.xml_rpc_url
            login_user: Override wiki.login_user

        Returns:
            New Config instance with overrides applied
        """
        wiki = self.wiki
        if xml_rpc_url is not None:
            wiki = replace(wiki, xml_rpc_url=xml_rpc_url)
        if login_user is not None:
            wiki = replace(wiki, login_user=login_user)
        return replace(self, wiki=wiki)
