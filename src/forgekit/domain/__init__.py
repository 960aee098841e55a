"""
Domain layer for forgekit.

Pure models with no I/O: specifiers, configuration models, command
shapes and the error taxonomy.
"""
