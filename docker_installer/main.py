"""Main entry point for the Docker installer."""

import argparse
import logging
import sys

from docker_installer.config import ENV_CONFIG_PATH, get_env_var, setup_logging
from docker_installer.config_manager import load_config
from docker_installer.errors import ProvisioningError
from docker_installer.models import ProvisionOutcome, ProvisionResult
from docker_installer.provisioner import Provisioner
from docker_installer.system.base import SystemOperations
from docker_installer.system.subprocess_ops import SubprocessSystemOperations

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="docker-installer",
        description="Install Docker Engine on Ubuntu from Docker's APT repository.",
    )
    p.add_argument("--config", default=None, help="YAML file with configuration overrides")
    p.add_argument("--log-file", default=None, help="Path to the installation log")
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARN", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (default: INFO)",
    )
    p.add_argument(
        "-y",
        "--yes",
        action="store_true",
        default=None,
        help="Reinstall over an existing installation without asking",
    )
    p.add_argument(
        "--skip-smoke-test",
        action="store_true",
        help="Do not run a container after installing",
    )
    return p


def run(
    argv: list[str] | None = None,
    system: SystemOperations | None = None,
    provisioner_factory=Provisioner,
) -> int:
    """Run the installer and return the process exit code.

    The final status is always logged: a non-zero exit reports its code and
    the log file location, whatever ended the run.
    """
    args = build_parser().parse_args(argv)
    log_path = setup_logging(args.log_level, args.log_file)

    exit_code = 1
    result: ProvisionResult | None = None
    try:
        config = load_config(
            args.config or get_env_var(ENV_CONFIG_PATH) or None,
            assume_yes=args.yes,
            smoke_test=False if args.skip_smoke_test else None,
        )
        provisioner = provisioner_factory(config, system or SubprocessSystemOperations())
        result = provisioner.run()
        exit_code = 0
    except ProvisioningError as e:
        logger.error(str(e))
        exit_code = e.exit_code
    except KeyboardInterrupt:
        logger.error("Interrupted")
        exit_code = EXIT_INTERRUPTED
    except (OSError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        exit_code = 1
    finally:
        if exit_code != 0:
            logger.error(f"Installation failed with exit code {exit_code}. Log: {log_path}")
        elif result is not None and result.outcome is ProvisionOutcome.ABORTED_BY_USER:
            logger.info(f"Nothing changed. Log: {log_path}")
        else:
            logger.info(f"Log: {log_path}")

    return exit_code


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
