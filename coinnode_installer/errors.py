# Path and File Name : /home/coinnode/installer/coinnode_installer/errors.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Exception taxonomy shared by installer, uninstaller and steps

"""
Installer exception taxonomy.

- PreconditionError: abort before any mutation (privileges, OS, declined gate, run lock)
- StepFailedError: a fatal provisioning step failed; carries the step record
- UserCancelled: operator declined a confirmation (clean exit, code 0)
- ConfigurationError: invalid settings file or configuration model
"""


class ProvisioningError(Exception):
    """Base class for all installer errors."""
    pass


class PreconditionError(ProvisioningError):
    """Raised when a run cannot start (exit code 1, host untouched)."""
    pass


class ConfigurationError(ProvisioningError):
    """Raised when settings or a configuration model are invalid."""
    pass


class UserCancelled(ProvisioningError):
    """Raised when the operator declines to continue (exit code 0)."""
    pass


class StepFailedError(ProvisioningError):
    """Raised by the dispatcher when a fatal step fails."""

    def __init__(self, record):
        self.record = record
        super().__init__(f"Step '{record.name}' failed: {record.result.reason}")


class RpcError(ProvisioningError):
    """Raised when a daemon JSON-RPC call fails or returns an error object."""
    pass


class InstallStateError(ProvisioningError):
    """Raised when the install state record cannot be written or signed."""
    pass
