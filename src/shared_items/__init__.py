"""Fetch paginated Microsoft Graph drive-item collections."""

__version__ = "0.1.0"
