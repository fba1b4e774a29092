"""Distribution identity and codename resolution."""

import logging
import shlex

from docker_installer.errors import UnsupportedOSError
from docker_installer.models import OSIdentity
from docker_installer.system.base import SystemOperations

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = "/etc/os-release"

# Ubuntu LTS releases the Docker repository publishes packages for
LTS_CODENAMES: dict[str, str] = {
    "24.04": "noble",
    "22.04": "jammy",
    "20.04": "focal",
    "18.04": "bionic",
}


def parse_os_release(content: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` content into a dictionary.

    Values may be bare, single- or double-quoted. Comments, blank lines and
    malformed lines are ignored.

    Args:
        content: Raw text of an os-release file

    Returns:
        Mapping of field names to unquoted values
    """
    fields: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if not key.isidentifier():
            continue
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.debug(f"Ignoring malformed os-release line: {raw_line!r}")
            continue
        fields[key] = parts[0] if parts else ""
    return fields


def lookup_codename(version_id: str) -> str:
    """Map an Ubuntu version identifier to its codename.

    Args:
        version_id: Release number such as "22.04"

    Returns:
        Codename such as "jammy"

    Raises:
        UnsupportedOSError: If the version is not a known LTS release
    """
    codename = LTS_CODENAMES.get(version_id.strip()) if version_id else None
    if codename is None:
        raise UnsupportedOSError(f"Unsupported Ubuntu version: {version_id or 'unknown'}")
    return codename


def read_os_identity(system: SystemOperations, path: str = OS_RELEASE_PATH) -> OSIdentity:
    """Read the distribution identity from an os-release file.

    Raises:
        UnsupportedOSError: If the file is missing or carries no ID field
    """
    content = system.read_file(path)
    if content is None:
        raise UnsupportedOSError(f"Cannot determine distribution: {path} not found")

    identity = OSIdentity.from_os_release(parse_os_release(content))
    if not identity.distribution:
        raise UnsupportedOSError(f"Cannot determine distribution: no ID in {path}")
    return identity


def resolve_codename(
    system: SystemOperations, identity: OSIdentity, distribution: str = "ubuntu"
) -> str:
    """Resolve the release codename using a layered fallback.

    1. ``lsb_release -cs`` when the tool is installed;
    2. the codename fields of the os-release file;
    3. the static LTS version table.

    A derivative (``ID`` other than ``distribution``) reports its own codename
    through lsb_release and its own version in ``VERSION_ID``, so only
    ``UBUNTU_CODENAME`` is used for it.

    Args:
        system: Host access used to run lsb_release
        identity: Parsed os-release identity
        distribution: Distribution whose codenames the repository publishes

    Raises:
        UnsupportedOSError: If none of the methods yields a codename
    """
    if identity.distribution != distribution:
        if identity.ubuntu_codename:
            logger.debug(f"Codename from UBUNTU_CODENAME: {identity.ubuntu_codename}")
            return identity.ubuntu_codename
        raise UnsupportedOSError(
            f"Cannot determine the {distribution} release of {identity.distribution}: "
            "UBUNTU_CODENAME is not set"
        )

    if system.command_exists("lsb_release"):
        result = system.run(["lsb_release", "-cs"], check=False)
        codename = result.stdout.strip()
        if result.ok and codename:
            logger.debug(f"Codename from lsb_release: {codename}")
            return codename
        logger.warning("lsb_release did not report a codename, falling back to os-release")
    else:
        logger.debug("lsb_release not available, falling back to os-release")

    if identity.release_codename:
        logger.debug(f"Codename from os-release: {identity.release_codename}")
        return identity.release_codename

    codename = lookup_codename(identity.version_id)
    logger.debug(f"Codename from version table: {identity.version_id} -> {codename}")
    return codename
