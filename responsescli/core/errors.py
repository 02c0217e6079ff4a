# responsescli/core/errors.py
"""
Exception hierarchy for ResponsesCLI.

Lower-level failures (SDK, transport, filesystem) are converted into one of
these types before they reach UI code.
"""


class ResponsesCLIError(Exception):
    """Base exception for all ResponsesCLI errors."""
    pass


class UnknownStreamEventError(ResponsesCLIError):
    """Raised when a stream event carries a wire type outside the known enumeration."""

    def __init__(self, wire_type: str):
        super().__init__(f"Unknown response stream type string: {wire_type}")
        self.wire_type = wire_type


class TurnFailedError(ResponsesCLIError):
    """A turn ended on a protocol error event or a transport failure."""
    pass


class TurnCancelledError(ResponsesCLIError):
    """A turn was cancelled by the user before the stream completed."""

    def __init__(self, message: str = "Aborted"):
        super().__init__(message)


class ChatStorageError(ResponsesCLIError):
    """The persisted chat history could not be read or written."""
    pass


class ProviderError(ResponsesCLIError):
    """A remote file, vector store or response operation failed."""
    pass


class ResourceNotFoundError(ProviderError):
    """The remote file, vector store or link does not exist."""
    pass
