"""Prompt building, generation coordination and history."""
