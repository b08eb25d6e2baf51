# Path and File Name : /home/coinnode/installer/coinnode_installer/installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: coinnode-setup entry point: preconditions, run lock, probe and mode dispatch

"""
coinnode-setup

Order of a run:
1. Run log
2. Root and OS checks (abort before any mutation)
3. Run lock for the whole run
4. Settings, version resolution, install probe
5. Mode dispatch

Exit code 0 on success or operator cancel, 1 on a failed precondition or step.
"""

import argparse
import logging
import sys

from . import __version__, console
from .configurator.answers import AnswersExhausted, ConsoleAnswers
from .dispatcher import Dispatcher
from .errors import PreconditionError, ProvisioningError, StepFailedError, UserCancelled
from .host.run_lock import RunLock
from .host.runner import HostRunner
from .logging_setup import configure_logging
from .settings import load_settings
from .system.install_probe import detect_existing_install
from .system.os_check import detect_os, is_root
from .system.resource_check import detect_resources, disk_free_gb, is_rotational
from .system.version_resolver import resolve_software_version

logger = logging.getLogger(__name__)


def check_preconditions() -> None:
    """
    Raises:
        PreconditionError: Not root, or not a Debian-family host
    """
    if not is_root():
        raise PreconditionError("This installer must be run as root (use: sudo coinnode-setup)")
    os_info = detect_os()
    if not os_info.is_supported_distro:
        raise PreconditionError(f"Unsupported OS ({os_info.version_label}); "
                                "a Debian or Ubuntu based distribution is required")
    console.success(f"Detected OS: {os_info.version_label}")


def run_setup() -> None:
    """One installer pass. Raises ProvisioningError subclasses on failure."""
    check_preconditions()

    with RunLock():
        settings = load_settings()
        if settings.source:
            console.info(f"Using settings from {settings.source}")
        profile = settings.profile

        version = resolve_software_version(profile.version_pin, profile.release_api_url,
                                           profile.fallback_version)
        console.info(f"{profile.display_name} version: {version}")

        resources = detect_resources()
        console.info(f"CPU: {resources.cpu_model or 'unknown'} ({resources.cpu_cores} cores), "
                     f"RAM: {resources.ram_mb} MB")

        runner = HostRunner()
        snapshot = detect_existing_install(settings, runner)

        dispatcher = Dispatcher(settings, runner, ConsoleAnswers(), resources, version, snapshot,
                                disk_free_gb=disk_free_gb, disk_is_rotational=is_rotational)
        dispatcher.run()


def main():
    parser = argparse.ArgumentParser(
        prog="coinnode-setup",
        description="Build, configure and manage a cryptocurrency full node (standard or mining pool backend)",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.parse_args()

    log_file = configure_logging()
    logger.info(f"coinnode-setup {__version__} started")

    try:
        run_setup()
    except UserCancelled as e:
        console.info(str(e) or "Cancelled")
        sys.exit(0)
    except KeyboardInterrupt:
        print("\n\nSetup cancelled by user.", file=sys.stderr)
        logger.warning("Interrupted by operator")
        sys.exit(1)
    except AnswersExhausted as e:
        console.error(str(e))
        sys.exit(1)
    except StepFailedError as e:
        console.error(str(e))
        if log_file:
            console.info(f"Run log: {log_file}")
        sys.exit(1)
    except ProvisioningError as e:
        console.error(str(e))
        sys.exit(1)

    logger.info("coinnode-setup finished")
    sys.exit(0)


if __name__ == '__main__':
    main()
