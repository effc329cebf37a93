"""
The export, fetch and publish steps, plus the process and HTTP capabilities
they are built on.
"""
