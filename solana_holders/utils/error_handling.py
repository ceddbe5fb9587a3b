"""
Error handling utilities for Solana Holders.

This module provides standardized error handling mechanisms including:
- Custom exception classes
- A decorator that maps transport errors onto the package's exceptions
"""

import functools
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type, TypeVar, cast

# Get logger
logger = logging.getLogger(__name__)

# Type variable for function return types
F = TypeVar('F', bound=Callable[..., Any])


class ErrorCode(Enum):
    """Error codes for Solana Holders."""
    # General errors
    UNKNOWN_ERROR = 1000
    CONFIGURATION_ERROR = 1001
    VALIDATION_ERROR = 1002

    # Network errors
    NETWORK_ERROR = 2000
    PROVIDER_ERROR = 2001

    # RPC errors
    RPC_ERROR = 3000
    ACCOUNT_NOT_FOUND_ERROR = 3001

    # Data errors
    DATA_ERROR = 4000
    PARSING_ERROR = 4001
    NO_HOLDERS_ERROR = 4002


# Base exception classes
class HolderAnalysisError(Exception):
    """Base exception class for all Solana Holders errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize a new HolderAnalysisError.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        # Format the error message
        formatted_message = f"[{error_code.name}] {message}"
        if details:
            formatted_message += f" - Details: {details}"

        super().__init__(formatted_message)


class ConfigurationError(HolderAnalysisError):
    """Error related to configuration issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(HolderAnalysisError):
    """Error related to validation failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class ProviderError(HolderAnalysisError):
    """A transient failure of an external data provider.

    Raised for network errors, HTTP errors and non-success payloads. Callers
    treat it as absence of data unless they cannot proceed without it.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the provider error.

        Args:
            message: Error message
            provider: Name of the provider that failed
            status_code: HTTP status code, if any
            error_code: Error code from ErrorCode enum
            details: Additional error details
        """
        self.provider = provider
        self.status_code = status_code

        error_details = dict(details or {})
        if provider:
            error_details["provider"] = provider
        if status_code:
            error_details["status_code"] = status_code

        super().__init__(message, error_code, error_details)


class ChainQueryError(ProviderError):
    """Exception for chain RPC errors, including a missing mint account."""

    def __init__(
        self,
        message: str,
        rpc_error_code: Optional[int] = None,
        error_code: ErrorCode = ErrorCode.RPC_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.rpc_error_code = rpc_error_code

        error_details = dict(details or {})
        if rpc_error_code is not None:
            error_details["rpc_error_code"] = rpc_error_code

        super().__init__(
            message,
            provider="solana-rpc",
            error_code=error_code,
            details=error_details
        )


class NoHoldersError(HolderAnalysisError):
    """Raised when a run needs a non-empty holder set and none was found."""

    def __init__(self, mint: str):
        self.mint = mint
        super().__init__(
            f"No token holders found for mint {mint}",
            ErrorCode.NO_HOLDERS_ERROR,
            {"mint": mint}
        )


def transform_exceptions(
    mapping: Dict[Type[Exception], Callable[[Exception], Exception]]
) -> Callable[[F], F]:
    """
    Decorator for transforming exceptions to standardized types.

    This decorator catches specified exception types and transforms them
    with the matching factory. Exceptions that already belong to this
    package pass through untouched.

    Args:
        mapping: Dictionary mapping source exception types to factories
            building the replacement exception

    Returns:
        Decorated function with exception transformation

    Example:
        @transform_exceptions({
            httpx.HTTPError: lambda e: ProviderError(str(e), provider="solscan")
        })
        async def fetch(address):
            ...
    """
    def _transform(e: Exception) -> Optional[Exception]:
        if isinstance(e, HolderAnalysisError):
            return None
        for source_type, factory in mapping.items():
            if isinstance(e, source_type):
                return factory(e)
        return None

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    replacement = _transform(e)
                    if replacement is None:
                        raise
                    raise replacement from e

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                replacement = _transform(e)
                if replacement is None:
                    raise
                raise replacement from e

        return cast(F, sync_wrapper)

    return decorator
