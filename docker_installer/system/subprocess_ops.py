"""Host system access through spawned processes."""

import getpass
import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path

from docker_installer.errors import StepFailedError
from docker_installer.models import CommandResult
from docker_installer.system.base import SystemOperations

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
COMMAND_NOT_FOUND = 127


def _fmt_argv(argv: list[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class SubprocessSystemOperations(SystemOperations):
    """Runs commands on the local host, elevating through sudo when needed."""

    def __init__(self, sudo: str = "sudo", env: dict[str, str] | None = None):
        """Initialize the system operations.

        Args:
            sudo: Elevation command used for privileged calls when not root
            env: Extra environment variables for every command
        """
        self.sudo = sudo
        # apt-get must never stop to ask questions
        self.env = {"DEBIAN_FRONTEND": "noninteractive", **(env or {})}

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def can_elevate(self) -> bool:
        if not self.command_exists(self.sudo):
            return False
        result = self.run([self.sudo, "-n", "true"], check=False)
        return result.ok

    def command_exists(self, name: str) -> bool:
        return shutil.which(name) is not None

    def _elevate(self, argv: list[str], privileged: bool) -> list[str]:
        if privileged and not self.is_root():
            # -E keeps DEBIAN_FRONTEND for apt-get
            return [self.sudo, "-E", *argv]
        return argv

    def run(
        self,
        argv: list[str],
        *,
        check: bool = True,
        privileged: bool = False,
        input_text: str | None = None,
    ) -> CommandResult:
        argv_list = self._elevate(list(argv), privileged)
        logger.debug(f"CMD {_fmt_argv(argv_list)}")

        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=dict(os.environ, **self.env),
            )
            result = CommandResult(
                argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr
            )
        except FileNotFoundError:
            result = CommandResult(
                argv=argv_list,
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{argv_list[0]}: command not found",
            )

        if result.stdout:
            logger.debug(f"STDOUT {result.stdout.strip()}")
        if result.stderr:
            logger.debug(f"STDERR {result.stderr.strip()}")

        if check and not result.ok:
            raise StepFailedError(argv_list, result.returncode, result.stderr)

        return result

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None

    def write_file(self, path: str, content: str, *, mode: int = 0o644) -> None:
        if self.is_root():
            target = Path(path)
            try:
                target.write_text(content, encoding="utf-8")
                target.chmod(mode)
            except OSError as e:
                raise StepFailedError(["write", path], 1, str(e)) from e
            return

        self.run(["tee", path], privileged=True, input_text=content)
        self.run(["chmod", format(mode, "o"), path], privileged=True)

    def invoking_user(self) -> str:
        return os.environ.get("USER") or getpass.getuser()

    def prompt(self, message: str) -> str:
        try:
            return input(message)
        except EOFError:
            return ""
