"""
Package a local virtual machine into a versioned box and maintain the
metadata.json index clients use to discover and download it.
"""

__version__ = "0.1.0"
