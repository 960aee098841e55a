"""Project and user state commands."""

from .cli import state_app

__all__ = ["state_app"]
