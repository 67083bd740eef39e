"""Shared helpers for value normalization."""
