"""Tests for logging setup and environment helpers."""

import logging
import re

import pytest
from colorama import Fore

from docker_installer.config import (
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    FALLBACK_LOG_NAME,
    get_env_var,
    setup_logging,
)

pytestmark = pytest.mark.usefixtures("reset_logging")

LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[(\w+)\] (.*)$")


class TestSetupLogging:
    def test_log_file_format(self, tmp_path):
        log_file = tmp_path / "install.log"
        assert setup_logging("INFO", str(log_file)) == str(log_file)

        log = logging.getLogger("docker_installer.test")
        log.info("Installing Docker...")
        log.warning("Log out and back in")
        log.error("Command failed (100): apt-get update")

        lines = log_file.read_text().splitlines()
        parsed = [LINE_RE.match(line).groups() for line in lines]
        assert parsed == [
            ("INFO", "Installing Docker..."),
            ("WARN", "Log out and back in"),
            ("ERROR", "Command failed (100): apt-get update"),
        ]

    def test_console_colors_and_streams(self, tmp_path, capsys):
        setup_logging("INFO", str(tmp_path / "install.log"))

        log = logging.getLogger("docker_installer.test")
        log.info("started")
        log.warning("careful")
        log.error("broken")

        captured = capsys.readouterr()
        assert f"{Fore.GREEN}[INFO]" in captured.out
        assert f"{Fore.YELLOW}[WARN]" in captured.out
        assert "broken" not in captured.out
        assert f"{Fore.RED}[ERROR]" in captured.err
        assert "broken" in captured.err

    def test_level_filters_debug(self, tmp_path):
        log_file = tmp_path / "install.log"
        setup_logging("INFO", str(log_file))

        logging.getLogger("docker_installer.test").debug("hidden")
        assert "hidden" not in log_file.read_text()

    def test_warn_alias_accepted(self, tmp_path):
        setup_logging("warn", str(tmp_path / "install.log"))
        assert logging.getLogger().level == logging.WARNING

    def test_environment_defaults(self, tmp_path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv(ENV_LOG_LEVEL, "DEBUG")
        monkeypatch.setenv(ENV_LOG_FILE, str(log_file))

        assert setup_logging() == str(log_file)
        assert logging.getLogger().level == logging.DEBUG

    def test_unwritable_path_falls_back_to_cwd(self, tmp_path, monkeypatch):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        actual = setup_logging("INFO", str(blocker / "install.log"))

        assert actual == str(workdir / FALLBACK_LOG_NAME)
        assert "logging to" in (workdir / FALLBACK_LOG_NAME).read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        log_file = tmp_path / "install.log"
        setup_logging("INFO", str(log_file))
        setup_logging("INFO", str(log_file))

        logging.getLogger("docker_installer.test").info("once")
        assert log_file.read_text().count("once") == 1


class TestGetEnvVar:
    def test_returns_value(self, monkeypatch):
        monkeypatch.setenv("DOCKER_INSTALLER_TEST", "value")
        assert get_env_var("DOCKER_INSTALLER_TEST") == "value"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("DOCKER_INSTALLER_TEST", raising=False)
        assert get_env_var("DOCKER_INSTALLER_TEST", "fallback") == "fallback"
        assert get_env_var("DOCKER_INSTALLER_TEST") == ""

    def test_required_missing_raises(self, monkeypatch):
        monkeypatch.delenv("DOCKER_INSTALLER_TEST", raising=False)
        with pytest.raises(ValueError, match="DOCKER_INSTALLER_TEST"):
            get_env_var("DOCKER_INSTALLER_TEST", required=True)
