"""Docker Engine provisioning workflow for Ubuntu hosts."""

import logging
import time
from collections.abc import Callable
from typing import Any

from docker_installer.config_manager import InstallerConfig
from docker_installer.errors import (
    InsufficientPrivilegeError,
    StepFailedError,
    TransientNetworkError,
    WrongDistributionError,
)
from docker_installer.key_downloader import KeyDownloader
from docker_installer.models import OSIdentity, ProvisionOutcome, ProvisionResult, VerificationReport
from docker_installer.os_release import read_os_identity, resolve_codename
from docker_installer.repository_config import build_source_line, render_sources_file
from docker_installer.system.base import SystemOperations
from docker_installer.utils import extract_version, with_retry

logger = logging.getLogger(__name__)

AFFIRMATIVE_ANSWERS = ("y", "Y")


class Provisioner:
    """Installs Docker Engine from Docker's APT repository.

    The run is a linear pipeline. Read-only detection and precondition checks
    come first, so a host that cannot be provisioned is never modified.
    Network-dependent steps are retried with a constant backoff, removal of
    conflicting packages is best-effort, and every other failure is raised
    immediately.
    """

    def __init__(
        self,
        config: InstallerConfig,
        system: SystemOperations,
        key_downloader: KeyDownloader | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the provisioner.

        Args:
            config: Settings for this run
            system: Host access used for every external effect
            key_downloader: Signing key downloader (created from config if omitted)
            sleep: Sleep function used between retry attempts
        """
        self.config = config
        self.system = system
        if key_downloader is None:
            key_downloader = KeyDownloader(timeout=config.download_timeout)
        self.key_downloader = key_downloader
        self.sleep = sleep

    def _retry(self, description: str, operation: Callable[[], Any], retry_on: tuple) -> Any:
        return with_retry(
            self.config.retry_attempts,
            self.config.retry_backoff_seconds,
            operation,
            retry_on=retry_on,
            description=description,
            sleep=self.sleep,
        )

    def detect_os_identity(self) -> OSIdentity:
        """Read the distribution identity of the host."""
        identity = read_os_identity(self.system)
        logger.info(
            f"Detected {identity.pretty_name or identity.distribution} "
            f"(version {identity.version_id or 'unknown'})"
        )
        return identity

    def check_preconditions(self, identity: OSIdentity) -> None:
        """Ensure the installer may modify this host.

        Raises:
            InsufficientPrivilegeError: If neither root nor passwordless sudo
            WrongDistributionError: If the host is not the supported distribution
        """
        if not self.system.is_root() and not self.system.can_elevate():
            raise InsufficientPrivilegeError(
                "Root privileges or passwordless sudo are required"
            )

        wanted = self.config.supported_distribution
        if identity.distribution != wanted and wanted not in identity.id_like:
            raise WrongDistributionError(
                f"This installer only supports {wanted}, found {identity.distribution}"
            )

    def resolve_distribution_codename(self, identity: OSIdentity) -> str:
        """Resolve the release codename used in the repository definition."""
        codename = resolve_codename(
            self.system, identity, self.config.supported_distribution
        )
        logger.info(f"Ubuntu codename: {codename}")
        return codename

    def detect_architecture(self) -> str:
        """Return the Debian architecture tag of the host."""
        arch = self.system.run(["dpkg", "--print-architecture"]).stdout.strip()
        if not arch:
            raise StepFailedError(["dpkg", "--print-architecture"], 1, "empty architecture")
        logger.info(f"Architecture: {arch}")
        return arch

    def check_existing_installation(self) -> bool:
        """Decide whether to continue when Docker is already present.

        Returns:
            True to proceed, False to abort. Anything but an explicit "y"
            aborts.
        """
        if not self.system.command_exists(self.config.command_name):
            return True

        logger.warning("Docker is already installed")
        if self.config.assume_yes:
            logger.info("Reinstalling without confirmation (--yes)")
            return True

        answer = self.system.prompt("Docker is already installed. Reinstall? [y/N] ")
        if answer.strip() in AFFIRMATIVE_ANSWERS:
            return True

        logger.info("Installation cancelled by user")
        return False

    def remove_conflicting_packages(self) -> None:
        """Remove distribution packages that conflict with Docker Engine."""
        logger.info("Removing old Docker versions...")
        result = self.system.run(
            ["apt-get", "remove", "-y", *self.config.conflicting_packages],
            check=False,
            privileged=True,
        )
        if not result.ok:
            # apt-get fails when none of the packages are installed
            logger.debug(f"apt-get remove exited with {result.returncode}, ignoring")

    def refresh_package_index(self) -> None:
        """Refresh the APT package index, retrying on failure."""
        self._retry(
            "apt-get update",
            lambda: self.system.run(["apt-get", "update"], privileged=True),
            retry_on=(StepFailedError,),
        )

    def install_prerequisites(self) -> None:
        """Install packages needed to trust the Docker repository."""
        logger.info("Updating package lists...")
        self.refresh_package_index()
        if self.config.prerequisite_packages:
            logger.info("Installing dependencies...")
            self.system.run(
                ["apt-get", "install", "-y", *self.config.prerequisite_packages],
                privileged=True,
            )

    def register_repository(self, codename: str, arch: str) -> str:
        """Store the signing key and write the repository definition.

        Returns:
            The source line written to the sources list
        """
        cfg = self.config
        self.system.run(["install", "-m", "0755", "-d", cfg.keyring_dir], privileged=True)

        logger.info("Downloading Docker GPG key...")
        key = self._retry(
            "Signing key download",
            lambda: self.key_downloader.fetch_key(cfg.key_url),
            retry_on=(TransientNetworkError,),
        )
        self.system.write_file(cfg.keyring_path, key, mode=0o644)

        logger.info("Creating Docker repository...")
        source_line = build_source_line(
            arch, codename, cfg.keyring_path, cfg.repo_url, cfg.repo_component
        )
        self.system.write_file(cfg.sources_list_path, render_sources_file(source_line), mode=0o644)
        logger.info(f"Repository file contents: {source_line}")
        return source_line

    def install_packages(self) -> None:
        """Refresh the index with the new repository and install Docker."""
        logger.info("Updating packages with new repository...")
        self.refresh_package_index()

        logger.info("Installing Docker...")
        self.system.run(["apt-get", "install", "-y", *self.config.packages], privileged=True)

    def activate_service(self) -> None:
        """Start the Docker service and enable it at boot."""
        logger.info("Starting Docker service...")
        service = self.config.service_name
        self.system.run(["systemctl", "start", service], privileged=True)
        self.system.run(["systemctl", "enable", service], privileged=True)

    def grant_user_access(self) -> str | None:
        """Add the invoking user to the docker group.

        Returns:
            The user added, or None when running as root
        """
        if self.system.is_root():
            return None

        user = self.system.invoking_user()
        group = self.config.access_group
        logger.info(f"Adding user {user} to the {group} group...")
        self.system.run(["usermod", "-aG", group, user], privileged=True)
        logger.warning(f"Log out and back in, or run: newgrp {group}")
        return user

    def verify_installation(self) -> VerificationReport:
        """Check that Docker runs.

        A missing docker command is fatal; a failing smoke test only warns.

        Raises:
            StepFailedError: If the docker command is not resolvable
        """
        logger.info("Verifying installation...")
        command = self.config.command_name
        if not self.system.command_exists(command):
            raise StepFailedError([command], 127, f"{command} not found after installation")

        banner = self.system.run([command, "--version"]).stdout.strip()
        logger.info(banner)
        docker_version = extract_version(banner) or banner

        compose_version = None
        compose = self.system.run([command, "compose", "version"], check=False)
        if compose.ok:
            logger.info(compose.stdout.strip())
            compose_version = extract_version(compose.stdout)
        else:
            logger.warning("docker compose plugin is not available")

        smoke_test_passed = None
        if self.config.smoke_test:
            # The new group membership is not active yet in this session
            smoke = self.system.run(
                [command, "run", "--rm", self.config.smoke_test_image],
                check=False,
                privileged=True,
            )
            smoke_test_passed = smoke.ok
            if smoke.ok:
                logger.info("Smoke test passed")
            else:
                logger.warning(
                    f"Smoke test with {self.config.smoke_test_image} failed "
                    f"(exit {smoke.returncode})"
                )

        return VerificationReport(
            docker_version=docker_version,
            compose_version=compose_version,
            smoke_test_passed=smoke_test_passed,
        )

    def run(self) -> ProvisionResult:
        """Run the complete installation.

        Returns:
            ProvisionResult with outcome SUCCESS or ABORTED_BY_USER

        Raises:
            ProvisioningError: On any fatal failure
        """
        identity = self.detect_os_identity()
        self.check_preconditions(identity)
        codename = self.resolve_distribution_codename(identity)
        arch = self.detect_architecture()

        if not self.check_existing_installation():
            return ProvisionResult(
                outcome=ProvisionOutcome.ABORTED_BY_USER,
                codename=codename,
                architecture=arch,
            )

        self.remove_conflicting_packages()
        self.install_prerequisites()
        self.register_repository(codename, arch)
        self.install_packages()
        self.activate_service()
        self.grant_user_access()
        report = self.verify_installation()

        logger.info("Docker installed successfully!")
        return ProvisionResult(
            outcome=ProvisionOutcome.SUCCESS,
            codename=codename,
            architecture=arch,
            report=report,
        )
