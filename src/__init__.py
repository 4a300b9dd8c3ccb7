"""adpulse: weekly AI campaign analysis pipeline."""

from adpulse.version import __version__

__all__ = ["__version__"]
