class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class DocumentRemovedError(ProcessorError):
    """Raised when a document disappears from the store while in flight."""
