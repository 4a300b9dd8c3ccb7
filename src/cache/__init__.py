"""Fingerprints, key scheme and analysis stores."""
