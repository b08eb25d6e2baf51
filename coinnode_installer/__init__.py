# Path and File Name : /home/coinnode/installer/coinnode_installer/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Package initialization for the node installer

"""
coinnode_installer: build, configure, run and remove a cryptocurrency full
node (standard or mining pool backend) on a Debian-family host.
"""

__version__ = '1.0.0'
