"""Data models for the Docker installer."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class OSIdentity:
    """Identity of the running distribution as read from os-release."""

    distribution: str
    version_id: str
    pretty_name: str = ""
    id_like: tuple[str, ...] = ()
    release_codename: str | None = None
    ubuntu_codename: str | None = None

    @classmethod
    def from_os_release(cls, fields: dict[str, str]) -> "OSIdentity":
        """Create an OSIdentity from parsed os-release fields.

        ``ubuntu_codename`` only carries ``UBUNTU_CODENAME``, which derivatives
        set to the Ubuntu release they are built on.
        """
        return cls(
            distribution=fields.get("ID", "").lower(),
            version_id=fields.get("VERSION_ID", ""),
            pretty_name=fields.get("PRETTY_NAME", ""),
            id_like=tuple(fields.get("ID_LIKE", "").lower().split()),
            release_codename=(
                fields.get("UBUNTU_CODENAME") or fields.get("VERSION_CODENAME") or None
            ),
            ubuntu_codename=fields.get("UBUNTU_CODENAME") or None,
        )


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single external command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class VerificationReport:
    """What the post-install checks found."""

    docker_version: str
    compose_version: str | None
    smoke_test_passed: bool | None


class ProvisionOutcome(Enum):
    """Terminal states of an installation run."""

    SUCCESS = "success"
    ABORTED_BY_USER = "aborted_by_user"


@dataclass
class ProvisionResult:
    """Summary of a completed installation run.

    Failed runs raise ProvisioningError instead of returning a result.
    """

    outcome: ProvisionOutcome
    codename: str | None = None
    architecture: str | None = None
    report: VerificationReport | None = None
