# Path and File Name : /home/coinnode/installer/coinnode_installer/tasks.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Ordered provisioning step graph with explicit step states, results and run report

"""
Task Graph: ordered, named provisioning steps.

Each step reads the NodeConfig, mutates the host through the runner and
returns a StepResult. Step states only move forward:

    PENDING -> RUNNING -> SUCCEEDED | FAILED | SKIPPED

A FAILED fatal step halts the graph (later steps stay PENDING). A FAILED
advisory step is recorded and the graph continues. Exceptions raised inside a
step are converted into failures; nothing escapes the graph.
"""

import logging
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from . import console
from .config_model import NodeConfig
from .host.runner import HostRunner

logger = logging.getLogger(__name__)


class StepState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class Severity(Enum):
    FATAL = "fatal"
    ADVISORY = "advisory"


_TRANSITIONS = {
    StepState.PENDING: {StepState.RUNNING},
    StepState.RUNNING: {StepState.SUCCEEDED, StepState.FAILED, StepState.SKIPPED},
    StepState.SUCCEEDED: set(),
    StepState.FAILED: set(),
    StepState.SKIPPED: set(),
}


class InvalidTransition(RuntimeError):
    pass


@dataclass
class StepResult:
    ok: bool
    reason: str = ""
    log_excerpt: str = ""
    log_path: Optional[Path] = None
    skipped: bool = False
    remediation: Optional[str] = None

    @classmethod
    def success(cls, reason: str = "") -> "StepResult":
        return cls(ok=True, reason=reason)

    @classmethod
    def skip(cls, reason: str) -> "StepResult":
        return cls(ok=True, reason=reason, skipped=True)

    @classmethod
    def failure(cls, reason: str, log_excerpt: str = "", log_path: Optional[Path] = None,
                remediation: Optional[str] = None) -> "StepResult":
        return cls(ok=False, reason=reason, log_excerpt=log_excerpt, log_path=log_path,
                   remediation=remediation)


@dataclass
class StepContext:
    """Everything a step needs besides its own code."""
    config: NodeConfig
    runner: HostRunner
    sleep: Callable[[float], None] = time.sleep
    rpc_factory: Optional[Callable] = None  # NodeConfig -> DaemonRpcClient


@dataclass(frozen=True)
class Step:
    name: str
    description: str
    action: Callable[[StepContext], StepResult]
    severity: Severity = Severity.FATAL


@dataclass
class StepRecord:
    step: Step
    state: StepState = StepState.PENDING
    result: Optional[StepResult] = None

    @property
    def name(self) -> str:
        return self.step.name

    def transition(self, new_state: StepState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"Step '{self.name}': {self.state.value} -> {new_state.value} not allowed")
        self.state = new_state


@dataclass
class RunReport:
    records: List[StepRecord] = field(default_factory=list)

    @property
    def fatal_failure(self) -> Optional[StepRecord]:
        for record in self.records:
            if record.state is StepState.FAILED and record.step.severity is Severity.FATAL:
                return record
        return None

    @property
    def advisory_failures(self) -> List[StepRecord]:
        return [r for r in self.records
                if r.state is StepState.FAILED and r.step.severity is Severity.ADVISORY]

    @property
    def ok(self) -> bool:
        return self.fatal_failure is None

    def state_of(self, name: str) -> Optional[StepState]:
        for record in self.records:
            if record.name == name:
                return record.state
        return None


class TaskGraph:
    """Runs steps in order."""

    def __init__(self, steps: List[Step]):
        names = [s.name for s in steps]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate step names in task graph: {names}")
        self.steps = list(steps)

    def run(self, context: StepContext) -> RunReport:
        report = RunReport(records=[StepRecord(step=s) for s in self.steps])
        total = len(report.records)

        for index, record in enumerate(report.records, start=1):
            console.step(f"{index}/{total}", record.step.description)
            record.transition(StepState.RUNNING)
            result = self._execute(record.step, context)
            record.result = result

            if not result.ok:
                record.transition(StepState.FAILED)
                if record.step.severity is Severity.FATAL:
                    console.error(f"{record.step.description} failed: {result.reason}")
                    logger.error(f"Fatal step '{record.name}' failed; halting graph")
                    break
                console.warning(f"{record.step.description} did not complete: {result.reason}")
                if result.remediation:
                    console.info(f"To finish manually: {result.remediation}")
            elif result.skipped:
                record.transition(StepState.SKIPPED)
                console.info(f"Skipped: {result.reason}")
            else:
                record.transition(StepState.SUCCEEDED)
                console.success(result.reason or record.step.description)

        return report

    @staticmethod
    def _execute(step: Step, context: StepContext) -> StepResult:
        try:
            result = step.action(context)
        except Exception as e:
            logger.error(f"Step '{step.name}' raised: {e}\n{traceback.format_exc()}")
            return StepResult.failure(f"{type(e).__name__}: {e}")
        if not isinstance(result, StepResult):
            return StepResult.failure(f"step returned {type(result).__name__}, expected StepResult")
        return result
