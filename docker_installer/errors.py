"""Error taxonomy for the Docker installer."""


class ProvisioningError(Exception):
    """Base exception for failures that end an installation run.

    Attributes:
        exit_code: Process exit code the CLI should terminate with
    """

    exit_code = 1

    def __init__(self, message: str, exit_code: int | None = None):
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class UnsupportedOSError(ProvisioningError):
    """The distribution release or its codename could not be determined."""


class WrongDistributionError(ProvisioningError):
    """The host is not running the supported distribution."""


class InsufficientPrivilegeError(ProvisioningError):
    """Neither root nor passwordless sudo is available."""


class TransientNetworkError(ProvisioningError):
    """A network operation failed and may succeed if attempted again."""


class StepFailedError(ProvisioningError):
    """An external command exited with a non-zero status."""

    def __init__(self, argv: list[str], returncode: int, stderr: str = ""):
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed ({returncode}): {' '.join(argv)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        # A command killed by a signal reports a negative status
        super().__init__(message, exit_code=returncode if returncode > 0 else 1)
