# Path and File Name : /home/coinnode/installer/coinnode_installer/__main__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Allows running the installer with python -m coinnode_installer

from .installer import main

main()
