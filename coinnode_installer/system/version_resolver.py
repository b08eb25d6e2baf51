# Path and File Name : /home/coinnode/installer/coinnode_installer/system/version_resolver.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Resolves the daemon version tag to build and reads the installed daemon version

"""
Version Resolver.

A pin of "latest" is resolved through the release API; any network error or
unparseable tag falls back to the last-known-good version (non-fatal).
"""

import logging
import re
from pathlib import Path
from typing import Optional

import requests

from ..host.runner import HostRunner

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"^v\d+\.\d+")
VERSION_PATTERN = re.compile(r"v\d+\.\d+\.\d+")
RELEASE_API_TIMEOUT = 10


def resolve_software_version(pinned: str, release_api_url: str, fallback: str,
                             session: Optional[requests.Session] = None) -> str:
    """
    Resolve the version tag to build.

    Args:
        pinned: An explicit tag (returned as is) or "latest"
        release_api_url: Release API endpoint returning {"tag_name": ...}
        fallback: Version used when the lookup fails

    Returns:
        Version tag, e.g. "v0.21.4"
    """
    if pinned.strip().lower() != "latest":
        return pinned.strip()

    http = session or requests
    try:
        response = http.get(release_api_url, timeout=RELEASE_API_TIMEOUT,
                            headers={"Accept": "application/vnd.github+json"})
        response.raise_for_status()
        tag = str(response.json().get("tag_name", "")).strip()
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning(f"Release lookup failed ({e}); using fallback version {fallback}")
        return fallback

    if not TAG_PATTERN.match(tag):
        logger.warning(f"Release lookup returned unusable tag {tag!r}; using fallback version {fallback}")
        return fallback

    logger.info(f"Resolved latest release: {tag}")
    return tag


def installed_version(runner: HostRunner, daemon_path: Path) -> str:
    """Version reported by `<daemon> --version`, or "unknown"."""
    if not Path(daemon_path).exists():
        return "unknown"
    result = runner.run([str(daemon_path), "--version"], timeout=30)
    match = VERSION_PATTERN.search(result.output or "")
    return match.group(0) if result.ok and match else "unknown"
