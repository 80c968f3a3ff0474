"""Session-backed token service."""
