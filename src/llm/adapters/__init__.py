"""Provider SDK adapters."""
