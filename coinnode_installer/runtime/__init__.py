# Path and File Name : /home/coinnode/installer/coinnode_installer/runtime/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Runtime layout package initialization

"""
Runtime Layout Package: service account and on-disk directory layout.
"""

from .accounts import user_exists, create_service_user, remove_service_user, chown_to_user
from .directory_layout import create_directories

__all__ = ['user_exists', 'create_service_user', 'remove_service_user', 'chown_to_user',
           'create_directories']
