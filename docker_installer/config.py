"""Configuration and logging setup for the Docker installer."""

import logging
import os
import sys
from pathlib import Path

from colorama import Fore, Style

DEFAULT_LOG_PATH = "/var/log/docker-install.log"
FALLBACK_LOG_NAME = "docker-install.log"

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment variable names
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_FILE = "DOCKER_INSTALLER_LOG"
ENV_CONFIG_PATH = "DOCKER_INSTALLER_CONFIG"

LEVEL_COLORS = {
    logging.DEBUG: Style.DIM,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """Console formatter that colours the level tag."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, "")
        return f"{color}[{record.levelname}]{Style.RESET_ALL} {record.getMessage()}"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


def _open_file_handler(log_file: str) -> tuple[logging.Handler, str]:
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_file, encoding="utf-8"), log_file
    except OSError:
        # /var/log is not writable for unprivileged runs
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback, encoding="utf-8"), fallback


def setup_logging(level: str | None = None, log_file: str | None = None) -> str:
    """Set up logging to a log file and colour-coded console output.

    Every entry in the log file reads ``[timestamp] [LEVEL] message``.
    Console output goes to stdout, errors to stderr.

    Args:
        level: Log level (DEBUG, INFO, WARN, ERROR). Defaults to INFO.
        log_file: Log file path. Defaults to /var/log/docker-install.log.

    Returns:
        Path of the log file actually in use
    """
    log_level = (level or os.getenv(ENV_LOG_LEVEL, "INFO")).upper()
    if log_level == "WARN":
        log_level = "WARNING"
    requested_path = log_file or os.getenv(ENV_LOG_FILE) or DEFAULT_LOG_PATH

    logging.addLevelName(logging.WARNING, "WARN")

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level))
    # Replace handlers from an earlier call, leave foreign ones alone
    for handler in list(root.handlers):
        if getattr(handler, "_docker_installer", False):
            root.removeHandler(handler)
            handler.close()

    file_handler, actual_path = _open_file_handler(requested_path)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(file_handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(ColorFormatter())
    stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    root.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(ColorFormatter())
    stderr_handler.setLevel(logging.ERROR)
    root.addHandler(stderr_handler)

    for handler in (file_handler, stdout_handler, stderr_handler):
        handler._docker_installer = True

    # Keep HTTP client chatter out of the install log
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if actual_path != requested_path:
        logging.getLogger(__name__).warning(
            f"Cannot write to {requested_path}, logging to {actual_path}"
        )
    return actual_path


def get_env_var(name: str, default: str | None = None, required: bool = False) -> str:
    """Get environment variable with optional default and validation.

    Args:
        name: Environment variable name
        default: Default value if not set
        required: Whether the variable is required

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set
    """
    value = os.getenv(name, default)

    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")

    return value or ""
