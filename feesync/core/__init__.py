"""Core package - configuration, errors, events and fee arithmetic."""
