"""LCP-specific exceptions for consistent error handling."""

import functools
from typing import Optional


class LcpError(Exception):
    """Base error for LCP reading and writing."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class LcpFormatError(LcpError):
    """Raised when bytes are not a valid LCP header or file."""
    pass


class UnsupportedSchemaError(LcpError):
    """Raised when a source has a band count or pixel type LCP cannot hold."""
    pass


class InvalidOptionError(LcpError):
    """Raised when a creation option value cannot be mapped."""
    pass


class GeoReferenceError(LcpError):
    """Raised when latitude or linear units cannot be derived."""
    pass


class LcpIOError(LcpError):
    """Raised when the primary file cannot be opened, read or written."""
    pass


class CancelledError(LcpError):
    """Raised when the progress callback asks to stop."""
    pass


def handle_io_error(operation_name: str):
    """Decorator turning ``OSError`` into ``LcpIOError``."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LcpError:
                raise
            except OSError as e:
                raise LcpIOError(f"{operation_name} failed: {e}", e) from e
        return wrapper
    return decorator
