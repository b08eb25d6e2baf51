# Path and File Name : /home/coinnode/installer/coinnode_installer/system/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Environment probe package initialization

"""
Environment Probe Package: read-only host checks.
"""

from .os_check import OsInfo, detect_os, is_root
from .resource_check import HostResources, detect_resources
from .version_resolver import resolve_software_version, installed_version
from .install_probe import InstallSnapshot, detect_existing_install

__all__ = ['OsInfo', 'detect_os', 'is_root', 'HostResources', 'detect_resources',
           'resolve_software_version', 'installed_version', 'InstallSnapshot',
           'detect_existing_install']
