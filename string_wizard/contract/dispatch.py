"""
Operation dispatch.

Runs exactly one handler for one operation: validate the request, call the
handler with an explicit context, then check its result against the contract.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from .context import HandlerContext
from .errors import (
    InputValidationError,
    OutputValidationError,
    TypedError,
    UndeclaredErrorType,
)
from .outcome import Failed, Fault, HandlerResult, Outcome, Rejected, Success
from .shapes import ShapeModel
from .validation import ValidationLayer

logger = logging.getLogger(__name__)

Operation = Callable[
    [ShapeModel, HandlerContext], Union[HandlerResult, Awaitable[HandlerResult]]
]


async def dispatch(
    layer: ValidationLayer,
    operation: str,
    handler: Operation,
    raw_input: Any,
    context: HandlerContext,
) -> Outcome:
    """
    Dispatch one invocation.

    Never raises for request, handler or result problems; those come back as
    Rejected or Fault. An operation name missing from the definition raises
    UnknownOperationError since it is a wiring mistake, not a request problem.
    """
    definition = layer.definition.operation(operation)

    try:
        validated = layer.validate_input(operation, raw_input)
    except InputValidationError as e:
        logger.info(
            f"Rejected {operation} request: {e.message}",
            extra=context.log_extra(),
        )
        return Rejected.from_error(e)

    try:
        result = handler(validated, context)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        logger.error(
            f"Unhandled error in {operation} handler",
            exc_info=True,
            extra=context.log_extra(),
        )
        return Fault(reason=type(e).__name__, cause=e)

    if isinstance(result, TypedError):
        try:
            payload = layer.validate_error(operation, result)
        except (UndeclaredErrorType, OutputValidationError) as e:
            logger.error(
                f"{operation} handler returned an invalid error: {e}",
                extra=context.log_extra(),
            )
            return Fault(reason=type(e).__name__, cause=e)
        status_code = definition.error(result.name).status_code  # type: ignore[union-attr]
        return Failed(error_type=result.name, payload=payload, status_code=status_code)

    if isinstance(result, Success):
        try:
            output = layer.validate_output(operation, result.output)
        except OutputValidationError as e:
            logger.error(
                f"{operation} handler output does not match its shape: {e.message}",
                extra=context.log_extra(),
            )
            return Rejected.from_error(e)
        return Success(output=output, status_code=definition.success_status)

    logger.error(
        f"{operation} handler returned unsupported result {type(result).__name__}",
        extra=context.log_extra(),
    )
    return Fault(reason="UnsupportedResult")
