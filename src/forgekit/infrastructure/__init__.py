"""
Infrastructure layer for forgekit.

Filesystem, subprocess and logging adapters used by the application layer.
"""
