"""
Identity layer exceptions.

Failures to acquire a token are reported as ``Unauthenticated`` values, not
exceptions. The only error raised here is for token cache persistence.
"""

from typing import Optional


class TokenCacheError(Exception):
    """Exception raised when the persisted token cache cannot be read or written."""

    def __init__(
        self,
        message: str = "Token cache I/O failed",
        *,
        location: Optional[str] = None,
        original_error: Optional[Exception] = None
    ) -> None:
        """
        Initialize token cache error.

        Args:
            message: Error message describing the failure
            location: Path of the cache file involved
            original_error: Original exception that caused this error, if any
        """
        self.message = message
        self.location = location
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        error_parts = [self.message]
        if self.location:
            error_parts.append(f"Location: {self.location}")
        if self.original_error:
            error_parts.append(f"Cause: {str(self.original_error)}")
        return " | ".join(error_parts)
