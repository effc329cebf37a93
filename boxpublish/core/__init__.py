"""
Run configuration and construction of the default collaborators.
"""
