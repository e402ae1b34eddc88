"""Exception hierarchy shared by the Vibe Check backend."""

from __future__ import annotations


class VibeCheckError(Exception):
    """Base class for every error raised by the analysis service."""


class ConfigurationError(VibeCheckError):
    """Raised at startup when the environment cannot produce valid settings."""


class ValidationError(VibeCheckError):
    """Raised when an inbound request is rejected before streaming starts."""


class UpstreamError(VibeCheckError):
    """The completion service answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Perplexity error {status_code}: {body}")


class TransportError(VibeCheckError):
    """The completion service could not be reached at all."""


class ExtractionError(VibeCheckError):
    """Model output could not be coerced into a JSON object."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        preview = raw.strip()[:80]
        super().__init__(f"Could not parse model output as JSON: {preview!r}")


class StorageError(VibeCheckError):
    """The result store failed to persist or read a record."""


class ResultNotFoundError(VibeCheckError):
    """No stored record matches the requested identifier."""

    def __init__(self, result_id: str) -> None:
        self.result_id = result_id
        super().__init__("Result not found or expired")
