"""
Service contract package.

Interface definition, validation layer, error taxonomy and the dispatch contract
shared by every operation handler.
"""

from .context import ANONYMOUS_CALLER, HandlerContext
from .definition import (
    InterfaceDefinition,
    OperationDefinition,
    load_interface_definition,
    parse_interface_definition,
)
from .dispatch import Operation, dispatch
from .errors import (
    ContractError,
    DefinitionError,
    InputValidationError,
    OutputValidationError,
    TypedError,
    UndeclaredErrorType,
    UnknownOperationError,
)
from .outcome import Failed, Fault, Outcome, Rejected, Success
from .validation import ValidationLayer

__all__ = [
    "ANONYMOUS_CALLER",
    "HandlerContext",
    "InterfaceDefinition",
    "OperationDefinition",
    "load_interface_definition",
    "parse_interface_definition",
    "Operation",
    "dispatch",
    "ContractError",
    "DefinitionError",
    "InputValidationError",
    "OutputValidationError",
    "TypedError",
    "UndeclaredErrorType",
    "UnknownOperationError",
    "Failed",
    "Fault",
    "Outcome",
    "Rejected",
    "Success",
    "ValidationLayer",
]
