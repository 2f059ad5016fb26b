"""
Contract error taxonomy.

Validation failures and contract violations are exceptions raised by the
validation layer. Declared business failures are values (TypedError) returned
by handlers, never raised.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class ContractError(Exception):
    """Base exception class for the service contract."""

    pass


class DefinitionError(ContractError):
    """Raised when the interface definition itself is malformed."""

    pass


class UnknownOperationError(ContractError):
    """Raised when an operation name is not declared in the interface definition."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation not declared: {operation}")


@dataclass(frozen=True)
class ValidationIssue:
    """One structural problem found in a request or response."""

    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


class ShapeValidationError(ContractError):
    """Raised when a value does not conform to its declared shape."""

    direction = "request"

    def __init__(self, operation: str, issues: List[ValidationIssue], message: Optional[str] = None):
        self.operation = operation
        self.issues = issues
        if message is None:
            count = len(issues)
            message = (
                f"{count} validation error{'s' if count != 1 else ''} detected. "
                + "; ".join(f"Value at '{i.path}' failed to satisfy constraint: {i.message}" for i in issues)
            )
        self.message = message
        super().__init__(message)


class InputValidationError(ShapeValidationError):
    """The request does not match the operation's input shape."""

    direction = "request"


class OutputValidationError(ShapeValidationError):
    """The handler's output (or error payload) does not match its declared shape."""

    direction = "response"


class UndeclaredErrorType(ContractError):
    """Raised when a handler returns an error the operation does not declare."""

    def __init__(self, operation: str, error_name: str):
        self.operation = operation
        self.error_name = error_name
        super().__init__(f"{operation} does not declare error {error_name}")


@dataclass(frozen=True)
class TypedError:
    """
    A declared business failure returned by a handler.

    Example:
        return TypedError.of("PalindromeException", message="Cannot handle palindrome")
    """

    name: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, name: str, **payload: Any) -> "TypedError":
        return cls(name=name, payload=payload)

    @property
    def message(self) -> Optional[str]:
        return self.payload.get("message")
