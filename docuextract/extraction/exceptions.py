class ExtractionError(Exception):
    """Base exception for extraction failures.

    Attributes:
        details: Diagnostic detail, e.g. the provider's error text.
        hint: Remediation advice for the operator.
    """

    code = "extraction_error"

    def __init__(self, message: str, *, details: str | None = None, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.hint = hint

    def describe(self) -> str:
        """Human-readable message including details and hint when present."""
        text = self.message
        if self.details:
            text = f"{text}: {self.details}"
        if self.hint:
            text = f"{text} ({self.hint})"
        return text


class InvalidInputError(ExtractionError):
    """Raised when no file, an empty file or an unsupported type is given."""

    code = "invalid_input"


class ConfigurationError(ExtractionError):
    """Raised when the provider credential is missing."""

    code = "configuration_error"


class ServiceUnavailableError(ExtractionError):
    """Raised when generation failed and no usable fallback model exists."""

    code = "service_unavailable"


class MalformedResponseError(ExtractionError):
    """Raised when the provider text is not the expected JSON object."""

    code = "malformed_response"

    def __init__(self, message: str, *, raw_text: str = "", hint: str | None = None) -> None:
        super().__init__(message, details=raw_text or None, hint=hint)
        self.raw_text = raw_text


class RateLimitedError(ExtractionError):
    """Raised when the provider rejects a request due to rate or quota limits."""

    code = "rate_limited"


ERRORS_BY_CODE: dict[str, type[ExtractionError]] = {
    cls.code: cls
    for cls in (
        InvalidInputError,
        ConfigurationError,
        ServiceUnavailableError,
        MalformedResponseError,
        RateLimitedError,
    )
}
