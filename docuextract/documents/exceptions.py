class StoreError(Exception):
    """Raised when a document snapshot cannot be loaded or persisted."""
