# Path and File Name : /home/coinnode/installer/coinnode_installer/console.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Operator-facing console output mirrored into the run log

"""
Console output helpers.

Every line shown to the operator is also written to the run log, so a failed
run can be reconstructed from the log alone. Quiet mode suppresses info and
success lines on the console (warnings and errors are always shown).
"""

import logging
import sys

logger = logging.getLogger("coinnode_installer.console")

RULE = "=" * 80
THIN_RULE = "-" * 80

_quiet = False


def set_quiet(quiet: bool) -> None:
    global _quiet
    _quiet = quiet


def section(title: str) -> None:
    logger.info(f"== {title} ==")
    if _quiet:
        return
    print("")
    print(RULE)
    print(f"  {title}")
    print(RULE)


def subsection(title: str) -> None:
    logger.info(f"-- {title} --")
    if _quiet:
        return
    print("")
    print(THIN_RULE)
    print(f"  {title}")
    print(THIN_RULE)


def step(label: str, message: str) -> None:
    logger.info(f"[{label}] {message}")
    if not _quiet:
        print(f"\n[{label}] {message}")


def info(message: str) -> None:
    logger.info(message)
    if not _quiet:
        print(f"  {message}")


def success(message: str) -> None:
    logger.info(message)
    if not _quiet:
        print(f"✓ {message}")


def warning(message: str) -> None:
    logger.warning(message)
    print(f"⚠ {message}")


def error(message: str) -> None:
    logger.error(message)
    print(f"✗ {message}", file=sys.stderr)


def plain(message: str = "") -> None:
    """Print without mirroring to the log (used for secrets and banners)."""
    if not _quiet:
        print(message)
