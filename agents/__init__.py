"""Suggestion agents: parsing, element resolution, mock generation and the request pipeline."""
