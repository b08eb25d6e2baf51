# Path and File Name : /home/coinnode/installer/coinnode_installer/host/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host interaction package initialization

"""
Host Interaction Package: external command execution and the run lock.
"""

from .runner import HostRunner, CommandResult, tail_file, tail_text
from .run_lock import RunLock

__all__ = ['HostRunner', 'CommandResult', 'RunLock', 'tail_file', 'tail_text']
