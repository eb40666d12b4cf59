"""Result pattern for parse and validation outcomes in ChilliLedger.

Parsing user input never coerces bad values into NaN or zero. Every parser
returns a Result carrying either the parsed value or a named failure.
"""
from dataclasses import dataclass
from typing import Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    """Represents the outcome of a parse or validation step.

    Attributes:
        success: Whether the operation succeeded.
        value: The parsed value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Category of error (see ErrorType).

    Usage:
        result = parse_positive_float(body.get("amount"), "amount")
        if result:
            amount = result.value
        else:
            errors["amount"] = result.error
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        """Create a failure result.

        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
        """
        return cls(success=False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """Get the value, raising an exception if the operation failed.

        Raises:
            ValueError: If the operation failed.
        """
        if not self.success:
            raise ValueError(f"Result unwrap failed: {self.error}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the value or a default if the operation failed."""
        return self.value if self.success else default


class ErrorType:
    """Standard error type constants."""
    REQUIRED = "REQUIRED"
    NOT_A_NUMBER = "NOT_A_NUMBER"
    NOT_AN_INTEGER = "NOT_AN_INTEGER"
    NOT_POSITIVE = "NOT_POSITIVE"
    NEGATIVE = "NEGATIVE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_DATE = "INVALID_DATE"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    DATABASE = "DATABASE"
