# Path and File Name : /home/coinnode/installer/coinnode_installer/host/runner.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Executes external host commands with captured output and bounded log excerpts

"""
Host Runner: the single seam through which the installer touches external tools.

Commands are argv lists (never a shell string). Output is captured and, when a
log file is given, appended to it so a failed build can be inspected in full
while the operator only sees a bounded tail.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = None  # builds can legitimately take an hour


@dataclass
class CommandResult:
    """Outcome of one external command."""
    argv: List[str]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 20) -> str:
        return tail_text(self.output, lines)


def tail_text(text: str, lines: int = 20) -> str:
    """Return the last `lines` lines of text."""
    if not text:
        return ""
    return "\n".join(text.rstrip("\n").splitlines()[-lines:])


def tail_file(path: Path, lines: int = 20) -> str:
    """Return the last `lines` lines of a log file ('' if unreadable)."""
    try:
        with open(path, 'r', errors='replace') as f:
            return tail_text(f.read(), lines)
    except OSError:
        return ""


class HostRunner:
    """Runs host commands."""

    def run(self, argv: Sequence[str], log_file: Optional[Path] = None,
            user: Optional[str] = None, cwd: Optional[Path] = None,
            env: Optional[Dict[str, str]] = None,
            timeout: Optional[float] = DEFAULT_TIMEOUT) -> CommandResult:
        """
        Run a command and capture combined stdout/stderr.

        Args:
            argv: Command and arguments
            log_file: Append output to this file when given
            user: Run as this user via sudo -u
            cwd: Working directory
            env: Extra environment variables
            timeout: Seconds before the command is killed

        Returns:
            CommandResult (returncode 127 when the executable is missing,
            124 on timeout)
        """
        argv = [str(a) for a in argv]
        if user:
            argv = ["sudo", "-u", user] + argv

        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        logger.debug(f"RUNNING COMMAND: {' '.join(argv)}")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors='replace',
                timeout=timeout,
            )
            result = CommandResult(argv=argv, returncode=proc.returncode, output=proc.stdout or "")
        except FileNotFoundError as e:
            result = CommandResult(argv=argv, returncode=127, output=str(e))
        except subprocess.TimeoutExpired as e:
            output = e.output if isinstance(e.output, str) else ""
            result = CommandResult(argv=argv, returncode=124, output=output + f"\nTimed out after {timeout}s")

        if log_file is not None:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, 'a') as f:
                f.write(f"$ {' '.join(argv)}\n")
                f.write(result.output)
                if result.output and not result.output.endswith("\n"):
                    f.write("\n")

        if not result.ok:
            logger.debug(f"Command exited {result.returncode}: {' '.join(argv)}")
        return result

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)
