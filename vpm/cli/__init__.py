"""Command-line interface for vpm."""
