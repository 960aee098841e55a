"""
Interface layer for forgekit.

The typer CLI and the restart wrapper behind the ``forge`` executable.
"""
