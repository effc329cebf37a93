"""
Local filesystem state: precondition checks and the metadata.json writer.
"""
