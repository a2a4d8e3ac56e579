"""Exceptions raised by the liquidity engine."""

from __future__ import annotations

from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize engine error.

        Args:
            message: Error message
            context: Extra values describing the failed operation
        """
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if not self.context:
            return self.args[0]
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.args[0]} ({details})"


class ArithmeticFault(EngineError):
    """Raised on any fixed-point arithmetic failure. Always fatal to the operation."""
    pass


class Overflow(ArithmeticFault):
    """Raised when a result exceeds the representable range."""
    pass


class Underflow(ArithmeticFault):
    """Raised when an unsigned result would be negative."""
    pass


class DivisionByZero(ArithmeticFault):
    """Raised on division by zero."""
    pass


class DomainError(ArithmeticFault):
    """Raised when an input lies outside a function's domain."""
    pass


class InvalidState(EngineError):
    """Raised when an operation is not valid for the current state."""
    pass


class Unauthorized(EngineError):
    """Raised when the caller lacks the required role."""

    def __init__(self, message: str = "Caller not authorized", **kwargs):
        """Initialize authorization error."""
        super().__init__(message, **kwargs)


class OrderBookError(EngineError):
    """Raised when the external order book rejects a placement or collection."""
    pass


class ConfigurationError(EngineError):
    """Raised when settings are invalid."""
    pass
