"""Shared errors and clock helpers."""
