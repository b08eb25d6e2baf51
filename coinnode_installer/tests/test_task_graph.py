# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_task_graph.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for step state transitions, fatal/advisory handling and the run report

"""
Tests:
1. Fatal failure halts the graph; later steps stay PENDING
2. Advisory failure is recorded and the graph continues
3. Exceptions inside a step become failures
4. Skipped steps and illegal transitions
"""

import unittest
import tempfile
import shutil
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.reporting import render_run_report
from coinnode_installer.tasks import (
    InvalidTransition, Severity, Step, StepContext, StepRecord, StepResult, StepState, TaskGraph,
)
from coinnode_installer.tests.fakes import FakeRunner, make_config, no_sleep


def ok(_context):
    return StepResult.success("done")


def fail(_context):
    return StepResult.failure("broken", log_excerpt="line 1\nline 2", remediation="fix it by hand")


def skip(_context):
    return StepResult.skip("already there")


def explode(_context):
    raise OSError("disk on fire")


class TestTaskGraph(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_graph_test_"))
        self.context = StepContext(make_config(self.test_dir), FakeRunner(), no_sleep)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_fatal_failure_halts(self):
        graph = TaskGraph([Step("a", "A", ok), Step("b", "B", fail), Step("c", "C", ok)])
        report = graph.run(self.context)
        self.assertEqual(report.state_of("a"), StepState.SUCCEEDED)
        self.assertEqual(report.state_of("b"), StepState.FAILED)
        self.assertEqual(report.state_of("c"), StepState.PENDING)
        self.assertFalse(report.ok)
        self.assertEqual(report.fatal_failure.name, "b")

    def test_advisory_failure_continues(self):
        graph = TaskGraph([Step("a", "A", fail, Severity.ADVISORY), Step("b", "B", ok)])
        report = graph.run(self.context)
        self.assertTrue(report.ok)
        self.assertEqual(report.state_of("b"), StepState.SUCCEEDED)
        self.assertEqual([r.name for r in report.advisory_failures], ["a"])
        lines = "\n".join(render_run_report(report))
        self.assertIn("fix it by hand", lines)

    def test_exception_becomes_failure(self):
        report = TaskGraph([Step("a", "A", explode), Step("b", "B", ok)]).run(self.context)
        record = report.records[0]
        self.assertEqual(record.state, StepState.FAILED)
        self.assertIn("disk on fire", record.result.reason)
        self.assertEqual(report.state_of("b"), StepState.PENDING)

    def test_non_result_return_is_failure(self):
        report = TaskGraph([Step("a", "A", lambda _c: None)]).run(self.context)
        self.assertEqual(report.state_of("a"), StepState.FAILED)

    def test_skip(self):
        report = TaskGraph([Step("a", "A", skip)]).run(self.context)
        self.assertEqual(report.state_of("a"), StepState.SKIPPED)
        self.assertTrue(report.ok)

    def test_fatal_report_shows_excerpt(self):
        report = TaskGraph([Step("a", "A", fail)]).run(self.context)
        lines = "\n".join(render_run_report(report))
        self.assertIn("Step 'a' failed: broken", lines)
        self.assertIn("line 2", lines)

    def test_duplicate_names_rejected(self):
        with self.assertRaises(ValueError):
            TaskGraph([Step("a", "A", ok), Step("a", "A again", ok)])

    def test_no_transition_back_to_pending(self):
        record = StepRecord(Step("a", "A", ok))
        record.transition(StepState.RUNNING)
        record.transition(StepState.SUCCEEDED)
        with self.assertRaises(InvalidTransition):
            record.transition(StepState.PENDING)
        with self.assertRaises(InvalidTransition):
            StepRecord(Step("b", "B", ok)).transition(StepState.SUCCEEDED)


if __name__ == '__main__':
    unittest.main()
