"""Installer configuration with optional YAML overrides."""

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml


def _check_type(name: str, value, default) -> None:
    """Raise ValueError when a setting does not match the type of its default."""
    if isinstance(default, bool):
        valid = isinstance(value, bool)
        expected = "a boolean"
    elif isinstance(default, int):
        valid = isinstance(value, int) and not isinstance(value, bool)
        expected = "an integer"
    elif isinstance(default, float):
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
        expected = "a number"
    elif isinstance(default, tuple):
        valid = isinstance(value, tuple) and all(isinstance(item, str) for item in value)
        expected = "a list of strings"
    else:
        valid = isinstance(value, str)
        expected = "a string"
    if not valid:
        raise ValueError(f"{name} must be {expected}, got {value!r}")


@dataclass(frozen=True)
class InstallerConfig:
    """Immutable settings for one installation run.

    Attributes:
        repo_url: Base URL of Docker's Ubuntu package repository
        key_url: URL of the repository signing key
        keyring_dir: Directory holding APT signing keys
        keyring_path: Where the signing key is stored
        sources_list_path: APT source definition written for the repository
        repo_component: Repository channel
        packages: Packages installed from the repository
        conflicting_packages: Distribution packages removed beforehand
        prerequisite_packages: Packages installed before registering the repository
        service_name: systemd unit started and enabled
        access_group: Group granting non-root access to the daemon
        command_name: Executable that marks an existing installation
        supported_distribution: os-release ID the installer accepts
        retry_attempts: Total attempts for network-dependent steps
        retry_backoff_seconds: Constant delay between attempts
        download_timeout: Signing key request timeout in seconds
        smoke_test: Whether to run a container after installing
        smoke_test_image: Image used by the smoke test
        assume_yes: Reinstall over an existing installation without asking
    """

    repo_url: str = "https://download.docker.com/linux/ubuntu"
    key_url: str = "https://download.docker.com/linux/ubuntu/gpg"
    keyring_dir: str = "/etc/apt/keyrings"
    keyring_path: str = "/etc/apt/keyrings/docker.asc"
    sources_list_path: str = "/etc/apt/sources.list.d/docker.list"
    repo_component: str = "stable"
    packages: tuple[str, ...] = (
        "docker-ce",
        "docker-ce-cli",
        "containerd.io",
        "docker-buildx-plugin",
        "docker-compose-plugin",
    )
    conflicting_packages: tuple[str, ...] = (
        "docker",
        "docker-engine",
        "docker.io",
        "containerd",
        "runc",
    )
    prerequisite_packages: tuple[str, ...] = ("ca-certificates",)
    service_name: str = "docker"
    access_group: str = "docker"
    command_name: str = "docker"
    supported_distribution: str = "ubuntu"
    retry_attempts: int = 3
    retry_backoff_seconds: float = 5.0
    download_timeout: int = 30
    smoke_test: bool = True
    smoke_test_image: str = "hello-world"
    assume_yes: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_type(f.name, getattr(self, f.name), f.default)
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {self.retry_attempts}")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must not be negative")
        if not self.packages:
            raise ValueError("packages must not be empty")

    @classmethod
    def from_yaml(cls, yaml_path: Path | str) -> "InstallerConfig":
        """Load configuration overrides from a YAML file.

        Keys that are absent keep their defaults. List values are stored as
        tuples.

        Args:
            yaml_path: Path to the YAML configuration file

        Returns:
            InstallerConfig with the file's values applied

        Raises:
            FileNotFoundError: If the YAML file does not exist
            ValueError: If the file is not valid YAML, not a mapping, or has
                unknown keys or wrongly typed values
        """
        with open(yaml_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(key, str) for key in data):
            raise ValueError(f"Configuration in {yaml_path} must be a mapping of setting names")

        return cls().with_overrides(**data)

    def with_overrides(self, **overrides) -> "InstallerConfig":
        """Return a copy with the given fields replaced.

        Raises:
            ValueError: If an override names an unknown field or has the wrong type
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        normalized = {
            key: tuple(value) if isinstance(value, list) else value
            for key, value in overrides.items()
        }
        return replace(self, **normalized)


def load_config(config_path: str | None = None, **overrides) -> InstallerConfig:
    """Build the run configuration from defaults, an optional file and overrides.

    Overrides whose value is None are ignored so CLI flags that were not given
    do not mask file settings.
    """
    config = InstallerConfig.from_yaml(config_path) if config_path else InstallerConfig()
    given = {key: value for key, value in overrides.items() if value is not None}
    return config.with_overrides(**given) if given else config
