"""
Validation layer.

Where: string_wizard/contract/validation.py
What: Structural validation of operation input, output and declared error payloads.
Why: Malformed requests must be rejected before business logic runs, and handler
     results must match the contract before they are serialized to the caller.
"""

from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel, ValidationError

from .definition import InterfaceDefinition, OperationDefinition
from .errors import (
    InputValidationError,
    OutputValidationError,
    TypedError,
    UndeclaredErrorType,
    UnknownOperationError,
    ValidationIssue,
)
from .shapes import ShapeModel, build_shape_model


class _OperationShapes:
    def __init__(self, operation: OperationDefinition):
        self.operation = operation
        self.input_model = build_shape_model(f"{operation.name}Input", operation.input_schema)
        self.output_model = build_shape_model(f"{operation.name}Output", operation.output_schema)
        self.error_models: Dict[str, Type[ShapeModel]] = {
            err.name: build_shape_model(err.name, err.payload_schema) for err in operation.errors
        }


class ValidationLayer:
    """
    Validators generated from an InterfaceDefinition.

    Models are built once at construction; validation itself keeps no state, so a
    single instance can serve concurrent invocations.
    """

    def __init__(self, definition: InterfaceDefinition):
        self.definition = definition
        self._shapes: Dict[str, _OperationShapes] = {
            name: _OperationShapes(op) for name, op in definition.operations.items()
        }

    def validate_input(self, operation: str, raw: Any) -> ShapeModel:
        """
        Validate raw request fields against the operation's input shape.

        Raises:
            UnknownOperationError: operation is not declared
            InputValidationError: missing field, wrong type or violated constraint
        """
        shapes = self._get(operation)
        if not isinstance(raw, Mapping):
            raise InputValidationError(
                operation, [ValidationIssue(path="/", message="Request must be a JSON object")]
            )
        try:
            return shapes.input_model.model_validate(dict(raw))
        except ValidationError as e:
            raise InputValidationError(operation, _issues(e)) from e

    def validate_output(self, operation: str, output: Any) -> Dict[str, Any]:
        """
        Validate a handler's successful output and return its serializable form.

        Raises:
            OutputValidationError: the output does not match the declared shape
        """
        shapes = self._get(operation)
        if isinstance(output, BaseModel):
            output = output.model_dump()
        if not isinstance(output, Mapping):
            raise OutputValidationError(
                operation, [ValidationIssue(path="/", message="Output must be an object")]
            )
        try:
            model = shapes.output_model.model_validate(dict(output))
        except ValidationError as e:
            raise OutputValidationError(operation, _issues(e)) from e
        return model.model_dump(exclude_none=True)

    def validate_error(self, operation: str, error: TypedError) -> Dict[str, Any]:
        """
        Check that a returned error is declared for the operation and well-shaped.

        Raises:
            UndeclaredErrorType: the operation does not declare this error
            OutputValidationError: the payload does not match the declared error shape
        """
        shapes = self._get(operation)
        model = shapes.error_models.get(error.name)
        if model is None:
            raise UndeclaredErrorType(operation, error.name)
        try:
            validated = model.model_validate(dict(error.payload))
        except ValidationError as e:
            raise OutputValidationError(operation, _issues(e)) from e
        return validated.model_dump(exclude_none=True)

    def _get(self, operation: str) -> _OperationShapes:
        try:
            return self._shapes[operation]
        except KeyError:
            raise UnknownOperationError(operation) from None


def _issues(error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for item in error.errors():
        path = "/" + "/".join(str(p) for p in item.get("loc", ()))
        issues.append(ValidationIssue(path=path, message=item.get("msg", "invalid value")))
    return issues
