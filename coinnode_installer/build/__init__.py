# Path and File Name : /home/coinnode/installer/coinnode_installer/build/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Build steps package initialization

"""
Build Package: OS dependencies, legacy database, daemon build and symlinks.
"""
