"""HTTP layer for the design suggestion API."""
