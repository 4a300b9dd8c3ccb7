# src/core/errors.py — v1
"""Root of the pipeline error hierarchy.

Module-specific errors live next to the code that raises them and derive
from AnalysisPipelineError so the dashboard can catch one type.
"""

from __future__ import annotations


class AnalysisPipelineError(Exception):
    """Base class for errors surfaced by the analysis pipeline."""
