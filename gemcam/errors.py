"""
Error types shared by the gemcam core.

A missing field is not an error: the extractor returns None for it.
"""


class GemcamError(Exception):
    """Base class for all gemcam errors."""
    pass


class BufferOverflowError(GemcamError):
    """Raised when a write would not fit in the output buffer."""

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Output buffer overflow: need {needed} bytes, {available} available"
        )


class BuilderStateError(GemcamError):
    """Raised when a JSON build sequence breaks the nesting rules."""
    pass


class InvalidArgumentError(GemcamError, ValueError):
    """Raised for missing or empty arguments where a value is required."""
    pass


class MalformedResponseError(GemcamError):
    """
    Raised when a response field was found but its value never terminates.

    The raw document is kept so callers can log it.
    """

    def __init__(self, message: str, document: str = ""):
        self.document = document
        super().__init__(message)


class GeminiAPIError(GemcamError):
    """Raised when the Gemini API rejects a request or reports an error."""

    def __init__(self, message: str, status: int = None, body: str = ""):
        self.message = message
        self.status = status
        self.body = body
        if status is not None:
            super().__init__(f"Gemini API error (HTTP {status}): {message}")
        else:
            super().__init__(f"Gemini API error: {message}")
