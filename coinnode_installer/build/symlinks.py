# Path and File Name : /home/coinnode/installer/coinnode_installer/build/symlinks.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Links installed daemon executables into the system bin directory

"""
Convenience symlinks for the installed executables.
"""

import os
from pathlib import Path

from ..tasks import StepContext, StepResult


def create_symlinks(context: StepContext) -> StepResult:
    config = context.config
    bin_dir = Path(config.paths.install_dir) / "bin"
    link_dir = Path(config.paths.bin_link_dir)

    linked, missing = [], []
    try:
        link_dir.mkdir(parents=True, exist_ok=True)
        for name in config.profile.binaries:
            target = bin_dir / name
            if not target.exists():
                missing.append(name)
                continue
            link = link_dir / name
            if link.is_symlink() or link.exists():
                link.unlink()
            os.symlink(target, link)
            linked.append(name)
    except OSError as e:
        return StepResult.failure(f"Failed to create symlinks in {link_dir}: {e}")

    reason = f"Symlinks created in {link_dir}: {', '.join(linked) or 'none'}"
    if missing:
        reason += f" (not built: {', '.join(missing)})"
    return StepResult.success(reason)


def remove_symlinks(binaries, link_dir: Path) -> int:
    removed = 0
    for name in binaries:
        link = Path(link_dir) / name
        if link.is_symlink() or link.exists():
            link.unlink()
            removed += 1
    return removed
