"""Common utility functions for bayeslink."""

from bayeslink.utils.timestamps import get_iso_timestamp

__all__ = ["get_iso_timestamp"]
