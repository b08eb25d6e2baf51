# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_run_lock.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for the host-wide run lock

import unittest
import tempfile
import shutil
import os
import fcntl
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.errors import PreconditionError
from coinnode_installer.host.run_lock import RunLock


class TestRunLock(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_lock_test_"))
        self.lock_path = self.test_dir / "run" / "coinnode-installer.lock"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_second_holder_rejected(self):
        with RunLock(self.lock_path) as first:
            self.assertTrue(first.held)
            self.assertEqual(self.lock_path.read_text(), str(os.getpid()))
            with self.assertRaises(PreconditionError) as ctx:
                RunLock(self.lock_path).acquire()
            self.assertIn(str(os.getpid()), str(ctx.exception))

    def test_released_lock_can_be_taken_again(self):
        lock = RunLock(self.lock_path)
        lock.acquire()
        lock.release()
        self.assertFalse(lock.held)
        self.assertTrue(self.lock_path.exists())
        inode = self.lock_path.stat().st_ino
        with RunLock(self.lock_path) as again:
            self.assertTrue(again.held)
            self.assertEqual(self.lock_path.stat().st_ino, inode)

    def test_lock_file_survives_release_for_waiting_opener(self):
        first = RunLock(self.lock_path)
        first.acquire()
        waiter_fd = os.open(str(self.lock_path), os.O_RDWR)
        try:
            first.release()
            with RunLock(self.lock_path):
                with self.assertRaises(OSError):
                    fcntl.flock(waiter_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        finally:
            os.close(waiter_fd)

    def test_release_without_acquire(self):
        RunLock(self.lock_path).release()


if __name__ == '__main__':
    unittest.main()
