"""Rich output formatters for built-in commands."""
