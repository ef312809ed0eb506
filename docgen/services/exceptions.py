"""
Service-layer exceptions for consistent error handling across campusdocs.

Validation, lookup and format errors are raised before any rendering work
starts. Generation failures wrap whatever the layout or serialization step
raised. Recoverable sub-failures (signature decode, logo loading, image
conversion) are logged where they happen and never reach these classes.
"""


class ServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class DocumentValidationError(ServiceError):
    """
    Raised when a required identifying field is absent.

    Example:
        No marksheet id was supplied, or a report export request is
        missing its type, format or data payload.
    """
    pass


class DocumentNotFound(ServiceError):
    """
    Raised when the referenced entity is absent in the backing store.

    Example:
        The document source returned None for the requested marksheet id.
    """
    pass


class UnsupportedFormat(ServiceError):
    """
    Raised when an output format tag is outside the closed set.

    Example:
        Requesting a report export with format 'xml'.
    """

    def __init__(self, export_format):
        self.export_format = export_format
        super().__init__(f"Unsupported format: {export_format!r}")


class GenerationFailed(ServiceError):
    """
    Raised when the layout or serialization step itself fails.

    Carries a human-readable message plus the diagnostic detail of the
    underlying error. Not retried internally.
    """

    def __init__(self, message: str, detail: str = ''):
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base}: {self.detail}" if self.detail else base
