"""Validation and finite-difference helpers."""
