# Path and File Name : /home/coinnode/installer/coinnode_installer/host/run_lock.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Advisory file lock preventing concurrent installer/uninstaller runs

"""
Run Lock: only one installer or uninstaller may mutate the host at a time.

Uses fcntl.flock() on a lock file holding the owner PID. The kernel drops the
lock when the holder exits, so a crashed run never leaves a stale lock behind.
The lock file itself is never removed: every run must lock the same inode.
"""

import fcntl
import os
from pathlib import Path
from typing import Optional

from ..errors import PreconditionError

DEFAULT_LOCK_PATH = Path("/run/coinnode-installer.lock")


class RunLock:
    """Exclusive, non-blocking host-wide run lock."""

    def __init__(self, lock_path: Path = DEFAULT_LOCK_PATH):
        self.lock_path = Path(lock_path)
        self._fd: Optional[int] = None

    def acquire(self) -> None:
        """
        Take the lock.

        Raises:
            PreconditionError: If another run holds the lock or the lock file
                               cannot be opened
        """
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(str(self.lock_path), os.O_CREAT | os.O_RDWR, 0o644)
        except OSError as e:
            raise PreconditionError(f"Cannot open run lock {self.lock_path}: {e}")

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            owner = self._read_owner(fd)
            os.close(fd)
            holder = f" (PID {owner})" if owner else ""
            raise PreconditionError(
                f"Another installer run is in progress{holder}. "
                f"Wait for it to finish; lock file: {self.lock_path}"
            )

        os.ftruncate(fd, 0)
        os.lseek(fd, 0, os.SEEK_SET)
        os.write(fd, str(os.getpid()).encode())
        self._fd = fd

    @staticmethod
    def _read_owner(fd: int) -> str:
        try:
            os.lseek(fd, 0, os.SEEK_SET)
            return os.read(fd, 32).decode(errors='replace').strip()
        except OSError:
            return ""

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
