"""Domain error taxonomy.

Every failure the page pipeline reports to a caller is one of these. Provider
and storage exceptions are translated into them at the generator and
publisher seams, and the API layer maps each kind to an HTTP status.
"""


class LandingerError(Exception):
    """Base exception for page pipeline errors."""

    kind = "error"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Structured form used in API error responses."""
        result: dict = {"success": False, "error": self.kind, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ValidationFailure(LandingerError):
    """Raised when required input is missing or invalid."""

    kind = "validation_failure"


class GenerationFailure(LandingerError):
    """Raised when the text-generation provider could not produce a page."""

    kind = "generation_failure"

    def __init__(self, message: str, details: str | None = None, attempts: int = 1):
        super().__init__(message, details)
        self.attempts = attempts

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["attempts"] = self.attempts
        return result


class StorageFailure(LandingerError):
    """Raised when a storage read, write or delete fails.

    ``partial`` is True when the page body was persisted (or removed) but its
    metadata sidecar was not, leaving the page live but missing from listings.
    """

    kind = "storage_failure"

    def __init__(
        self,
        message: str,
        details: str | None = None,
        partial: bool = False,
        canonical_key: str | None = None,
        public_url: str | None = None,
    ):
        super().__init__(message, details)
        self.partial = partial
        self.canonical_key = canonical_key
        self.public_url = public_url

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["partial"] = self.partial
        if self.canonical_key:
            result["canonicalKey"] = self.canonical_key
        if self.public_url:
            result["publicUrl"] = self.public_url
        return result


class PageNotFoundError(LandingerError):
    """Raised when no document is stored for a canonical key."""

    kind = "not_found"

    def __init__(self, canonical_key: str):
        super().__init__(f"Page '{canonical_key}' not found")
        self.canonical_key = canonical_key
