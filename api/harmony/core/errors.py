"""
Exception taxonomy for the harmony data layer.

Read paths never raise these (they log and return empty results); write paths
raise ``DataAccessError`` with a human-readable message and no retry.
"""


class HarmonyError(Exception):
    """Base class for errors raised by harmony services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(HarmonyError):
    """Required configuration (credentials, paths) is missing."""


class NotFoundError(HarmonyError):
    status_code = 404


class DataAccessError(HarmonyError):
    """A backend write failed. The message is generic, e.g. 'Failed to create bill'."""
