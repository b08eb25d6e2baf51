# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_build_steps.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for the daemon source build and the apt build-dependency step

"""
Tests:
1. Fresh source dir is cloned; an existing checkout is fetched instead
2. A failed compile returns the last 30 log lines and the log path
3. A build that leaves no daemon executable fails
4. Full package list falls back to the core list
5. Missing critical headers fail the dependency step
"""

import unittest
import tempfile
import shutil
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.build.daemon_build import LOG_TAIL, build_and_install_daemon
from coinnode_installer.build.dependencies import (
    CORE_PACKAGES, CRITICAL_HEADERS, FULL_PACKAGES, install_dependencies,
)
from coinnode_installer.tasks import StepContext
from coinnode_installer.tests.fakes import FakeRunner, make_config, no_sleep


class TestDaemonBuild(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_build_test_"))
        self.config = make_config(self.test_dir)
        self.runner = FakeRunner()
        self.log_file = Path(self.config.paths.build_log_dir) / "litecoin-build.log"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _build(self):
        return build_and_install_daemon(StepContext(self.config, self.runner, no_sleep))

    def _install_daemon(self):
        daemon = Path(self.config.daemon_path)
        daemon.parent.mkdir(parents=True, exist_ok=True)
        daemon.write_text("#!/bin/sh\n")

    def test_fresh_source_is_cloned(self):
        self._install_daemon()
        result = self._build()
        self.assertTrue(result.ok, result.reason)
        clone = self.runner.calls_starting("git", "clone")
        self.assertEqual(clone, [["git", "clone", self.config.profile.repo_url, self.config.paths.source_dir]])
        self.assertFalse(self.runner.ran("git", "fetch"))
        self.assertIn(["git", "checkout", "v0.21.4"], self.runner.calls)
        self.assertIn(["make", "-j4"], self.runner.calls)
        self.assertIn(["make", "install"], self.runner.calls)
        self.assertFalse(self.log_file.exists())

    def test_existing_checkout_is_fetched(self):
        (Path(self.config.paths.source_dir) / ".git").mkdir(parents=True)
        self._install_daemon()
        result = self._build()
        self.assertTrue(result.ok, result.reason)
        self.assertTrue(self.runner.ran("git", "fetch", "--all", "--tags"))
        self.assertFalse(self.runner.ran("git", "clone"))
        self.assertFalse(self.runner.ran("rm", "-rf"))
        self.assertTrue((Path(self.config.paths.source_dir) / ".git").is_dir())

    def test_stale_non_git_source_is_replaced(self):
        Path(self.config.paths.source_dir).mkdir(parents=True)
        self._install_daemon()
        self._build()
        self.assertEqual(self.runner.calls[0], ["rm", "-rf", self.config.paths.source_dir])
        self.assertTrue(self.runner.ran("git", "clone"))

    def test_failed_compile_returns_log_tail(self):
        compiler_output = "\n".join(f"error line {i}" for i in range(60))
        self.runner.respond(["make", "-j4"], 2, compiler_output)
        result = self._build()

        self.assertFalse(result.ok)
        self.assertEqual(result.reason, "compilation failed")
        self.assertEqual(result.log_path, self.log_file)
        self.assertTrue(self.log_file.exists())
        excerpt = result.log_excerpt.splitlines()
        self.assertEqual(len(excerpt), LOG_TAIL)
        self.assertEqual(LOG_TAIL, 30)
        self.assertEqual(excerpt[-1], "error line 59")
        self.assertNotIn("error line 29", excerpt)
        self.assertFalse(self.runner.ran("make", "install"))

    def test_missing_executable_after_install(self):
        result = self._build()
        self.assertFalse(result.ok)
        self.assertIn("not found after build", result.reason)
        self.assertIn(self.config.daemon_path, result.reason)
        self.assertEqual(result.log_path, self.log_file)

    def test_failed_clone_stops_build(self):
        self.runner.respond(["git", "clone"], 128, "fatal: unable to access repository")
        result = self._build()
        self.assertFalse(result.ok)
        self.assertIn("git clone", result.reason)
        self.assertIn("unable to access", result.log_excerpt)
        self.assertFalse(self.runner.ran("./autogen.sh"))


class TestDependencies(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_deps_test_"))
        self.config = make_config(self.test_dir)
        self.include_dir = self.test_dir / "include"
        self.runner = FakeRunner()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _all_headers(self):
        for headers in CRITICAL_HEADERS.values():
            header = self.include_dir / headers[-1]
            header.parent.mkdir(parents=True, exist_ok=True)
            header.write_text("")

    def _install(self):
        return install_dependencies(StepContext(self.config, self.runner, no_sleep), include_dir=self.include_dir)

    def _installs(self):
        return [c[4:] for c in self.runner.calls_starting("apt-get", "install")]

    def test_full_list_installed(self):
        self._all_headers()
        result = self._install()
        self.assertTrue(result.ok, result.reason)
        self.assertEqual(self._installs(), [FULL_PACKAGES])

    def test_core_fallback(self):
        self._all_headers()
        self.runner.respond(["apt-get", "install", "-y", "-qq"] + FULL_PACKAGES, 100,
                            "E: Unable to locate package libnatpmp-dev")
        result = self._install()
        self.assertTrue(result.ok, result.reason)
        self.assertEqual(self._installs(), [FULL_PACKAGES, CORE_PACKAGES])

    def test_core_failure_fails_step(self):
        self.runner.respond(["apt-get", "install"], 100, "E: dpkg was interrupted")
        result = self._install()
        self.assertFalse(result.ok)
        self.assertIn("dpkg was interrupted", result.log_excerpt)
        self.assertEqual(result.log_path, Path(self.config.paths.build_log_dir) / "apt-install.log")

    def test_missing_headers_fail(self):
        self._all_headers()
        (self.include_dir / "zmq.h").unlink()
        (self.include_dir / "fmt" / "format.h").unlink()
        result = self._install()
        self.assertFalse(result.ok)
        self.assertIn("libzmq", result.reason)
        self.assertIn("libfmt", result.reason)
        self.assertNotIn("libssl", result.reason)
        self.assertIsNotNone(result.remediation)

    def test_either_event_header_is_enough(self):
        self._all_headers()
        (self.include_dir / "event2" / "event.h").unlink()
        (self.include_dir / "event.h").write_text("")
        self.assertTrue(self._install().ok)

    def test_failed_update_stops_before_install(self):
        self.runner.respond(["apt-get", "update"], 100, "Temporary failure resolving")
        result = self._install()
        self.assertFalse(result.ok)
        self.assertEqual(self._installs(), [])


if __name__ == '__main__':
    unittest.main()
