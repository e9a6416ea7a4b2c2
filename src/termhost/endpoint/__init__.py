"""HTTP endpoint for termhost sessions."""
