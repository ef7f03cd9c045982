"""
Exception types for modulehub.

Unparsable versions are not errors: ``SemVer.parse`` returns None and
callers treat the ref as unversioned. Everything else raised by the
library derives from ModuleHubError, except filesystem failures while
removing a cached ref, which propagate as the original OSError.
"""


class ModuleHubError(Exception):
    """Base class for modulehub errors."""


class NetworkError(ModuleHubError):
    """A feed or archive request failed (transport error or HTTP status)."""

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FeedParseError(ModuleHubError):
    """The tag feed body could not be parsed."""


class ExtractionError(ModuleHubError):
    """A downloaded archive could not be extracted."""
