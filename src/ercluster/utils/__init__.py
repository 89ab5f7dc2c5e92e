"""Common utility functions for ercluster."""

from ercluster.utils.timestamps import get_iso_timestamp

__all__ = ["get_iso_timestamp"]
