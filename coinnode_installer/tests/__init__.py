# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Test package for the node installer
