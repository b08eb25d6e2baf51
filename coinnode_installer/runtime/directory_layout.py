# Path and File Name : /home/coinnode/installer/coinnode_installer/runtime/directory_layout.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Creates the node directory layout with service-user ownership and a private wallet dir

"""
Directory Layout: install, data, wallet, config, log and source directories.
"""

import os
from pathlib import Path

from ..tasks import StepContext, StepResult
from .accounts import chown_to_user


def create_directories(context: StepContext) -> StepResult:
    """
    Create every configured directory.

    Data and log directories (and the wallet dir) are owned by the service
    user; the wallet dir is 0700.
    """
    config = context.config
    paths = config.paths
    user = config.service_user

    try:
        for directory in paths.all_dirs():
            Path(directory).mkdir(parents=True, exist_ok=True)
        (Path(paths.install_dir) / "bin").mkdir(parents=True, exist_ok=True)

        for directory in (paths.data_dir, paths.wallet_dir, paths.log_dir):
            chown_to_user(Path(directory), user)
        os.chmod(paths.wallet_dir, 0o700)
    except (OSError, RuntimeError) as e:
        return StepResult.failure(f"Failed to create directory layout: {e}")

    return StepResult.success("Directories created")
