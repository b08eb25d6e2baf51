# Path and File Name : /home/coinnode/installer/coinnode_installer/logging_setup.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configures file logging for installer and uninstaller runs

"""
Logging setup: timestamped run log on disk, console output handled by console.py.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FILE = Path("/var/log/coinnode-installer.log")
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def configure_logging(log_file: Optional[Path] = None, level: int = logging.DEBUG) -> Optional[Path]:
    """
    Configure the root logger with a file handler.

    Falls back to a stderr handler (WARNING and above) when the log file
    cannot be opened, so an unprivileged dry invocation still reports problems.

    Returns:
        Path of the log file in use, or None when falling back to stderr
    """
    log_file = Path(log_file) if log_file else LOG_FILE
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
        handler.setLevel(level)
    except OSError as e:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        logging.getLogger(__name__).warning(f"Cannot write run log {log_file}: {e}; logging to stderr")
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # requests/urllib3 debug output is noise in the run log
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return log_file
