"""Custom exception hierarchy for categorization errors."""


class CategorizerError(Exception):
    """Base exception for all listing categorization errors."""
    
    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class LLMError(CategorizerError):
    """Raised when the AI gateway request fails.
    
    Attributes:
        status_code: HTTP status returned by the gateway (None for network errors)
    """
    
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
    
    @property
    def is_transient(self) -> bool:
        """5xx responses and network errors may succeed on retry."""
        return self.status_code is None or self.status_code >= 500


class ValidationError(CategorizerError):
    """Raised when input validation fails."""
    pass


class StorageError(CategorizerError):
    """Raised when database operations fail."""
    pass
