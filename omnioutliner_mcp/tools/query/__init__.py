"""Read-only outline tools."""
