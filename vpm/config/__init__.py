"""Configuration loading for vpm."""
