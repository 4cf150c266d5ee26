"""Custom exceptions for the drop pipeline."""

from typing import Optional, Dict, Any


class PipelineException(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Error message
        context: Additional context about the error
        original_error: Original exception if this wraps another error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize exception with context.

        Args:
            message: Error message
            context: Additional context (e.g., source_name, domain)
            original_error: Original exception if wrapping
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """String representation with context."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}: {self.original_error}]"
        return base


class FetchError(PipelineException):
    """Raised when fetching the drop feed fails.

    Common context fields:
        - source_name: Name of the feed
        - url: URL that failed
        - attempts: Number of attempts made
    """

    pass


class AuthenticationError(FetchError):
    """Raised when the feed rejects our credentials or returns no token."""

    pass


class ParseError(PipelineException):
    """Raised when parsing feed content fails.

    Common context fields:
        - source_name: Name of the feed
        - columns: Header row seen in the CSV
    """

    pass


class FeedArchiveError(ParseError):
    """Raised when the downloaded feed archive is empty or corrupt."""

    pass


class WhoisLookupError(PipelineException):
    """Raised when a WHOIS query fails after all retries.

    Common context fields:
        - domain: Domain being looked up
        - attempts: Number of attempts made
    """

    pass


class StoreError(PipelineException):
    """Raised when a store read or write fails.

    Common context fields:
        - domain: Domain being written (if applicable)
        - operation: upsert, query, delete
    """

    pass


class ConfigurationError(PipelineException):
    """Raised when configuration is invalid.

    Common context fields:
        - config_path: Path to config file
        - field: Invalid field name
    """

    pass
