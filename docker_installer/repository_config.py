"""APT source definition for the Docker repository."""

import logging

logger = logging.getLogger(__name__)


def _require_token(name: str, value: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{name} must not be empty")
    if any(ch.isspace() for ch in value):
        raise ValueError(f"{name} must not contain whitespace: {value!r}")
    # apt does not expand variables, a literal "$" would reach the source line
    if "$" in value:
        raise ValueError(f"{name} contains an unresolved variable reference: {value!r}")
    return value


def build_source_line(
    arch: str,
    codename: str,
    keyring_path: str,
    repo_url: str,
    component: str = "stable",
) -> str:
    """Build the one-line APT source definition for the Docker repository.

    Every value is substituted here; the result is written to disk verbatim.

    Args:
        arch: Debian architecture tag (e.g., "amd64")
        codename: Release codename (e.g., "jammy")
        keyring_path: Path of the stored signing key
        repo_url: Base URL of the package repository
        component: Repository channel

    Returns:
        Source line such as
        ``deb [arch=amd64 signed-by=/etc/apt/keyrings/docker.asc]
        https://download.docker.com/linux/ubuntu jammy stable``

    Raises:
        ValueError: If any value is empty, contains whitespace or a "$"
    """
    arch = _require_token("arch", arch)
    codename = _require_token("codename", codename)
    keyring_path = _require_token("keyring_path", keyring_path)
    repo_url = _require_token("repo_url", repo_url)
    component = _require_token("component", component)

    return f"deb [arch={arch} signed-by={keyring_path}] {repo_url} {codename} {component}"


def render_sources_file(source_line: str) -> str:
    """Render the content of the sources.list.d entry."""
    if "\n" in source_line:
        raise ValueError("source line must be a single line")
    return source_line + "\n"
