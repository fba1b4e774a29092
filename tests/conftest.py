"""Shared fixtures: a recording fake of the host system."""

import logging
from unittest.mock import Mock

import pytest

from docker_installer.config_manager import InstallerConfig
from docker_installer.errors import StepFailedError
from docker_installer.key_downloader import KeyDownloader
from docker_installer.models import CommandResult
from docker_installer.system.base import SystemOperations

UBUNTU_JAMMY_OS_RELEASE = """\
PRETTY_NAME="Ubuntu 22.04.4 LTS"
NAME="Ubuntu"
VERSION_ID="22.04"
VERSION="22.04.4 LTS (Jammy Jellyfish)"
VERSION_CODENAME=jammy
ID=ubuntu
ID_LIKE=debian
UBUNTU_CODENAME=jammy
"""

SAMPLE_KEY = """\
-----BEGIN PGP PUBLIC KEY BLOCK-----

mQINBFit2ioBEADhWpZ8/wvZ6hUTiXOwQHXMAlaFHcPH9hAtr4F1y2+OYdbtMuth
-----END PGP PUBLIC KEY BLOCK-----
"""

DEFAULT_OUTPUTS = {
    ("dpkg", "--print-architecture"): "amd64\n",
    ("lsb_release", "-cs"): "jammy\n",
    ("docker", "--version"): "Docker version 27.1.1, build 6312585\n",
    ("docker", "compose", "version"): "Docker Compose version v2.29.1\n",
}


class FakeSystemOperations(SystemOperations):
    """In-memory host that records every command and file write.

    Scripted results are given per argv tuple as a list of
    ``(returncode, stdout)`` pairs consumed in order; the last one repeats.
    Installing docker-ce makes the docker command resolvable.
    """

    def __init__(
        self,
        *,
        root: bool = True,
        sudo: bool = False,
        commands: tuple[str, ...] = (),
        files: dict[str, str] | None = None,
        responses: dict[tuple[str, ...], list[tuple[int, str]]] | None = None,
        answers: tuple[str, ...] = (),
        user: str = "alice",
    ):
        self.root = root
        self.sudo = sudo
        self.commands = set(commands)
        self.files = {"/etc/os-release": UBUNTU_JAMMY_OS_RELEASE} if files is None else dict(files)
        self.responses = {key: list(value) for key, value in (responses or {}).items()}
        self.answers = list(answers)
        self.user = user
        self.calls: list[tuple[list[str], bool]] = []
        self.written: dict[str, tuple[str, int]] = {}
        self.prompts: list[str] = []

    def is_root(self) -> bool:
        return self.root

    def can_elevate(self) -> bool:
        return self.sudo

    def command_exists(self, name: str) -> bool:
        return name in self.commands

    def run(self, argv, *, check=True, privileged=False, input_text=None):
        argv = list(argv)
        self.calls.append((argv, privileged))

        key = tuple(argv)
        scripted = self.responses.get(key)
        if scripted:
            returncode, stdout = scripted.pop(0) if len(scripted) > 1 else scripted[0]
        else:
            returncode, stdout = 0, DEFAULT_OUTPUTS.get(key, "")

        if argv[:2] == ["apt-get", "install"] and "docker-ce" in argv and returncode == 0:
            self.commands.add("docker")

        stderr = "" if returncode == 0 else f"{argv[0]} failed"
        if check and returncode != 0:
            raise StepFailedError(argv, returncode, stderr)
        return CommandResult(argv=argv, returncode=returncode, stdout=stdout, stderr=stderr)

    def read_file(self, path):
        return self.files.get(path)

    def write_file(self, path, content, *, mode=0o644):
        self.written[path] = (content, mode)
        self.files[path] = content

    def invoking_user(self):
        return self.user

    def prompt(self, message):
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else ""

    @property
    def commands_run(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]

    @property
    def mutations(self) -> list:
        """Privileged commands and file writes, in no particular order."""
        return [argv for argv, privileged in self.calls if privileged] + list(self.written)

    def count(self, *argv: str) -> int:
        return sum(1 for call in self.commands_run if call == list(argv))


@pytest.fixture
def make_system():
    """Factory for FakeSystemOperations instances."""
    return FakeSystemOperations


@pytest.fixture
def fake_system():
    return FakeSystemOperations()


@pytest.fixture
def config():
    """Default configuration with no real waiting between retries."""
    return InstallerConfig(retry_backoff_seconds=0)


@pytest.fixture
def key_downloader():
    downloader = Mock(spec=KeyDownloader)
    downloader.fetch_key.return_value = SAMPLE_KEY
    return downloader


@pytest.fixture
def sleeps():
    """Records every sleep requested by the retry helper."""
    return []


@pytest.fixture
def reset_logging():
    """Drop handlers installed by setup_logging so log files are closed."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if getattr(handler, "_docker_installer", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
