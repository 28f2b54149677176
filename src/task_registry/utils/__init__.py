"""Ambient utilities: logging, errors, configuration and metrics."""
