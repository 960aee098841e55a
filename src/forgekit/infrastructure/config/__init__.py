"""Configuration infrastructure: discovery, layered loading, and the manager facade."""
