# scanners/errors.py


class ScanError(Exception):
    """Base error for every AI scan."""


class ConfigurationError(ScanError):
    """The Gemini key / client is missing. Raised before any network call."""

    def __init__(self, message: str = "Gemini API key not configured"):
        super().__init__(message)


class RateLimitedError(ScanError):
    """Retries exhausted on 429 / resource exhausted; tell the user to wait."""

    def __init__(self, message: str = "API rate limit reached. Please wait a moment and try again."):
        super().__init__(message)


class ScanParseError(ScanError):
    """Model text had no usable JSON object."""
