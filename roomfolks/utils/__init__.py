"""Utility functions for roomfolks."""

from roomfolks.utils.logging import configure_logging

__all__ = ["configure_logging"]
