"""Text-generation backends, outcome classification and fallback."""
