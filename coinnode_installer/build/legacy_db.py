# Path and File Name : /home/coinnode/installer/coinnode_installer/build/legacy_db.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Downloads, patches and builds the legacy Berkeley DB needed for daemon wallets

"""
Legacy database dependency (Berkeley DB 4.8).

Debian no longer packages 4.8, which the daemon's legacy wallet format
requires, so it is built from source into its own prefix. An existing
libdb_cxx in the prefix short-circuits the whole step.
"""

import logging
import shutil
import tarfile
import tempfile
from pathlib import Path

import requests

from ..host.runner import tail_file
from ..tasks import StepContext, StepResult

logger = logging.getLogger(__name__)

ATOMIC_HEADER = Path("src") / "dbinc" / "atomic.h"
DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 8192
LOG_TAIL = 20


def is_installed(prefix: Path) -> bool:
    lib = Path(prefix) / "lib"
    return (lib / "libdb_cxx.a").exists() or (lib / "libdb_cxx.so").exists()


def download(url: str, destination: Path) -> None:
    """Stream url to destination. Raises requests.RequestException on failure."""
    with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
        response.raise_for_status()
        with open(destination, 'wb') as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)


def safe_extract(archive: Path, destination: Path) -> None:
    """Extract a tarball, refusing absolute or parent-relative member paths."""
    with tarfile.open(archive) as tar:
        for member in tar.getmembers():
            if member.name.startswith('/') or '..' in Path(member.name).parts:
                raise tarfile.TarError(f"Unsafe path in archive: {member.name}")
        tar.extractall(path=destination)


def patch_atomic_header(source_dir: Path) -> bool:
    """Rename __atomic_compare_exchange so it does not clash with the GCC builtin."""
    header = Path(source_dir) / ATOMIC_HEADER
    if not header.exists():
        return False
    text = header.read_text()
    if "__atomic_compare_exchange_db" in text:
        return True
    header.write_text(text.replace("__atomic_compare_exchange", "__atomic_compare_exchange_db"))
    return True


def install_legacy_database(context: StepContext) -> StepResult:
    config = context.config
    profile = config.profile
    prefix = Path(config.paths.bdb_prefix)
    if is_installed(prefix):
        return StepResult.skip(f"Berkeley DB already installed at {prefix}")

    runner = context.runner
    log_file = Path(config.paths.build_log_dir) / "bdb-build.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.write_text("")
    work_dir = Path(tempfile.mkdtemp(prefix="coinnode-bdb-"))

    def failed(reason: str) -> StepResult:
        return StepResult.failure(reason, log_excerpt=tail_file(log_file, LOG_TAIL), log_path=log_file)

    try:
        archive = work_dir / f"db-{profile.bdb_version}.NC.tar.gz"
        try:
            download(profile.bdb_url, archive)
        except requests.RequestException as e:
            return StepResult.failure(f"Failed to download Berkeley DB from {profile.bdb_url}: {e}")

        try:
            safe_extract(archive, work_dir)
        except (tarfile.TarError, OSError) as e:
            return StepResult.failure(f"Failed to extract Berkeley DB: {e}")

        source_dir = work_dir / f"db-{profile.bdb_version}.NC"
        if not patch_atomic_header(source_dir):
            logger.warning(f"{ATOMIC_HEADER} not found; building unpatched")

        build_dir = source_dir / "build_unix"
        result = runner.run([
            "../dist/configure", "--enable-cxx", "--disable-shared", "--with-pic",
            f"--prefix={prefix}", "--with-mutex=POSIX/pthreads",
        ], cwd=build_dir, log_file=log_file)
        if not result.ok:
            return failed("Berkeley DB configure failed")

        result = runner.run(["make", f"-j{config.build_jobs}"], cwd=build_dir, log_file=log_file)
        if not result.ok:
            return failed("Berkeley DB build failed")

        result = runner.run(["make", "install"], cwd=build_dir, log_file=log_file)
        if not result.ok:
            return failed("Berkeley DB install failed")
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    if not (prefix / "lib" / "libdb_cxx.a").exists():
        return failed(f"Berkeley DB verification failed: {prefix}/lib/libdb_cxx.a not found")

    log_file.unlink()
    return StepResult.success(f"Berkeley DB installed to {prefix}")
