# Path and File Name : /home/coinnode/installer/coinnode_installer/services/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service artifacts package initialization

"""
Service Artifacts Package: daemon config, systemd unit, service control and firewall.
"""
