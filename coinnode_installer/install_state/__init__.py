# Path and File Name : /home/coinnode/installer/coinnode_installer/install_state/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Install state record package initialization

"""
Install State Package: signed record of the installed artifacts.
"""

from .state_record import write_install_state, verify_install_state, record_install_state

__all__ = ['write_install_state', 'verify_install_state', 'record_install_state']
