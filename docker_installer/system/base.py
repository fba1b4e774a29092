"""Abstract base class for host system access."""

from abc import ABC, abstractmethod

from docker_installer.models import CommandResult


class SystemOperations(ABC):
    """Capability interface for everything the installer does to the host.

    The provisioning workflow only talks to the machine through this
    interface: package manager and service manager invocations, identity
    files, privilege checks and the interactive prompt. The real
    implementation spawns processes; tests substitute a recording fake.
    """

    @abstractmethod
    def is_root(self) -> bool:
        """Return True if the process runs with an effective uid of 0."""

    @abstractmethod
    def can_elevate(self) -> bool:
        """Return True if passwordless sudo is available."""

    @abstractmethod
    def command_exists(self, name: str) -> bool:
        """Return True if an executable is resolvable on PATH."""

    @abstractmethod
    def run(
        self,
        argv: list[str],
        *,
        check: bool = True,
        privileged: bool = False,
        input_text: str | None = None,
    ) -> CommandResult:
        """Run an external command.

        Args:
            argv: Command and arguments
            check: Raise StepFailedError on a non-zero exit status
            privileged: Run with elevated privileges when not already root
            input_text: Text passed to the command's standard input

        Returns:
            CommandResult with exit status and captured output

        Raises:
            StepFailedError: If check is set and the command fails
        """

    @abstractmethod
    def read_file(self, path: str) -> str | None:
        """Return the text of a file, or None if it cannot be read."""

    @abstractmethod
    def write_file(self, path: str, content: str, *, mode: int = 0o644) -> None:
        """Write a root-owned file and set its permission bits.

        Raises:
            StepFailedError: If the file cannot be written
        """

    @abstractmethod
    def invoking_user(self) -> str:
        """Return the login name of the user who started the installer."""

    @abstractmethod
    def prompt(self, message: str) -> str:
        """Ask the operator a question and return the raw answer.

        End of input is returned as an empty string.
        """
