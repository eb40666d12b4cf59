"""Custom exceptions for ChilliLedger application."""


class ChilliLedgerError(Exception):
    """Base exception for all ChilliLedger errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DatabaseError(ChilliLedgerError):
    """Raised when a database operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass


class ValidationError(ChilliLedgerError):
    """Raised when caller input violates a precondition.

    Attributes:
        errors: Mapping of field name to a human-readable message.
    """

    def __init__(self, errors: dict, message: str = None):
        self.errors = dict(errors)
        if message is None:
            fields = ", ".join(sorted(self.errors))
            message = f"Invalid input: {fields}" if fields else "Invalid input"
        super().__init__(message, {'fields': self.errors})


class CustomerNotFoundError(ValidationError):
    """Raised when a record references a customer that does not exist."""

    def __init__(self, customer_id=None):
        self.customer_id = customer_id
        message = "Customer not found"
        if customer_id is not None:
            message = f"Customer with ID {customer_id} not found"
        super().__init__({'customer_id': message}, message)
