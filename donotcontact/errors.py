"""
Exception classes shared across the pipeline and its adapters.

Stage errors (subclasses of ResolutionError) are caught by the pipeline and
turned into organization status and attempt records. ConfigurationError is
fatal at startup.
"""


class DoNotContactError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(DoNotContactError):
    """
    Raised when required settings are missing or invalid.

    Examples:
        - BRAVE_API_KEY not set
        - SMTP credentials missing
        - Identity fields missing or malformed
    """


class ResolutionError(DoNotContactError):
    """Base class for errors raised while resolving an organization."""


class NotFound(ResolutionError):
    """Search or extraction returned nothing usable."""


class CollaboratorError(ResolutionError):
    """
    An external service failed.

    Examples:
        - Search API returned a non-2xx status
        - Contact page timed out or could not be fetched
        - SMTP connection or send failure
    """


class NoActionableChannel(ResolutionError):
    """The contact page was reached but had no email address or form."""


__all__ = [
    "DoNotContactError",
    "ConfigurationError",
    "ResolutionError",
    "NotFound",
    "CollaboratorError",
    "NoActionableChannel",
]
