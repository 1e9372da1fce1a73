"""Error handling module."""
from listing_categorizer.errors.exceptions import (
    CategorizerError,
    LLMError,
    ValidationError,
    StorageError,
)

__all__ = [
    "CategorizerError",
    "LLMError",
    "ValidationError",
    "StorageError",
]
