"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SekaiFetchError(Exception):
    """Base exception for all application-specific errors."""


class FetchError(SekaiFetchError):
    """Raised when a master database collection cannot be retrieved or decoded."""


class DownloadError(SekaiFetchError):
    """Raised when a single audio or cover file cannot be downloaded."""


class TagToolMissing(SekaiFetchError):
    """Raised when the external tag editor cannot be found on PATH."""


class TagWriteError(SekaiFetchError):
    """Raised when writing tags to a downloaded file fails."""


class ConfigurationError(SekaiFetchError):
    """Raised for issues related to configuration loading or validation."""
