"""Project and user key-value state."""
