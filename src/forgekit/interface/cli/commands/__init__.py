"""
Built-in CLI command groups.

Each group lives in its own package: a typer sub-app in ``cli.py`` and
the command logic in ``services.py``.
"""
