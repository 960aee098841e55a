"""
Application layer for forgekit.

Dependency synchronization, the restart protocol, module resolution,
command registration and the Forge host that ties them together.
"""
