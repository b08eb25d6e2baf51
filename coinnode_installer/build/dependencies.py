# Path and File Name : /home/coinnode/installer/coinnode_installer/build/dependencies.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Installs OS build dependencies through apt-get and verifies critical headers

"""
Build dependencies: apt-get install of the daemon toolchain.

The full list includes optional packages that some releases lack; when it
fails the core list is tried. Success is judged by the headers the daemon
build actually needs, not by apt's exit code.
"""

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from ..tasks import StepContext, StepResult

CORE_PACKAGES = [
    "build-essential", "libtool", "autotools-dev", "autoconf", "automake",
    "pkg-config", "bsdmainutils", "python3", "libevent-dev", "libboost-dev",
    "libboost-system-dev", "libboost-filesystem-dev", "libboost-test-dev",
    "libboost-thread-dev", "libzmq3-dev", "libssl-dev", "libsqlite3-dev",
    "libfmt-dev", "git", "wget", "curl", "ufw", "jq", "openssl", "ca-certificates",
]

OPTIONAL_PACKAGES = [
    "libboost-chrono-dev", "libboost-program-options-dev", "libminiupnpc-dev",
    "libnatpmp-dev", "libqrencode-dev", "libprotobuf-dev", "protobuf-compiler",
    "htop", "iotop", "gnupg",
]

FULL_PACKAGES = CORE_PACKAGES + OPTIONAL_PACKAGES

# library -> any one of these headers must exist
CRITICAL_HEADERS: Dict[str, Tuple[str, ...]] = {
    "libevent": ("event.h", "event2/event.h"),
    "libboost": ("boost/version.hpp",),
    "libzmq": ("zmq.h",),
    "libssl": ("openssl/ssl.h",),
    "libsqlite3": ("sqlite3.h",),
    "libfmt": ("fmt/core.h", "fmt/format.h"),
}

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def missing_headers(include_dir: Path = Path("/usr/include")) -> List[str]:
    """Names of critical libraries none of whose headers are present."""
    missing = []
    for library, headers in CRITICAL_HEADERS.items():
        if not any((include_dir / h).exists() for h in headers):
            missing.append(library)
    return missing


def _apt_install(context: StepContext, packages: Sequence[str], log_file: Path):
    return context.runner.run(["apt-get", "install", "-y", "-qq"] + list(packages),
                              log_file=log_file, env=APT_ENV)


def install_dependencies(context: StepContext, include_dir: Path = Path("/usr/include")) -> StepResult:
    runner = context.runner
    log_file = Path(context.config.paths.build_log_dir) / "apt-install.log"

    result = runner.run(["apt-get", "update", "-qq"], log_file=log_file, env=APT_ENV)
    if not result.ok:
        return StepResult.failure("apt-get update failed", log_excerpt=result.tail(), log_path=log_file)

    # best effort
    runner.run(["apt-get", "upgrade", "-y", "-qq"], log_file=log_file, env=APT_ENV)

    result = _apt_install(context, FULL_PACKAGES, log_file)
    if not result.ok:
        result = _apt_install(context, CORE_PACKAGES, log_file)
        if not result.ok:
            return StepResult.failure("apt-get install of core build dependencies failed",
                                      log_excerpt=result.tail(), log_path=log_file)

    missing = missing_headers(include_dir)
    if missing:
        return StepResult.failure(f"Missing critical libraries: {' '.join(missing)}",
                                  log_path=log_file,
                                  remediation="install them manually and re-run coinnode-setup")
    return StepResult.success("Build dependencies installed and verified")
