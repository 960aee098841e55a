"""
forge command-line interface.

``main(argv)`` runs one invocation and returns its exit code.
"""

from .app import app, main

__all__ = ["app", "main"]
