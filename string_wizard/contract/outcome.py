"""
Invocation outcomes.

Handlers return `Success` or a `TypedError`. The dispatcher widens that into one
of four outcomes so the entry point never has to inspect exceptions:

    Success   - validated output
    Failed    - a declared, validated typed error
    Rejected  - a validation failure (request or response shape)
    Fault     - anything else; the cause is kept for logs only
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import ShapeValidationError, TypedError, ValidationIssue


@dataclass(frozen=True)
class Success:
    output: Dict[str, Any]
    status_code: int = 200


@dataclass(frozen=True)
class Failed:
    error_type: str
    payload: Dict[str, Any]
    status_code: int


@dataclass(frozen=True)
class Rejected:
    message: str
    issues: List[ValidationIssue] = field(default_factory=list)
    direction: str = "request"

    @classmethod
    def from_error(cls, error: ShapeValidationError) -> "Rejected":
        return cls(message=error.message, issues=list(error.issues), direction=error.direction)

    @property
    def is_client_error(self) -> bool:
        return self.direction == "request"


@dataclass(frozen=True)
class Fault:
    reason: str
    cause: Optional[BaseException] = field(default=None, compare=False)


Outcome = Union[Success, Failed, Rejected, Fault]
HandlerResult = Union[Success, TypedError]

__all__ = ["Success", "Failed", "Rejected", "Fault", "Outcome", "HandlerResult"]
