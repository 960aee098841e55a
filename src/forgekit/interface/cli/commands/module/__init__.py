"""Shared-home dependency and module commands."""

from .cli import module_app

__all__ = ["module_app"]
