"""Shared home: the manifest of installed dependencies and the installer."""
