"""
API Gateway proxy adapter.

Where: string_wizard/functions/common/apigateway.py
What: Turn an API Gateway v1 proxy event into (input, HandlerContext), dispatch the
      operation, and serialize the outcome into a proxy response.
Why: Each operation is deployed as its own function; they all share this adapter.
"""

import asyncio
import base64
import binascii
import json
import logging
import uuid
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional

from string_wizard.common.core.lambda_logging import robust_lambda_logger
from string_wizard.contract import (
    ANONYMOUS_CALLER,
    Failed,
    Fault,
    HandlerContext,
    Operation,
    Outcome,
    Rejected,
    Success,
    ValidationLayer,
    dispatch,
    load_interface_definition,
)
from string_wizard.contract.errors import ValidationIssue

logger = logging.getLogger(__name__)

ERROR_TYPE_HEADER = "X-Amzn-ErrorType"
TRACE_HEADER = "X-Amzn-Trace-Id"
INTERNAL_FAILURE_BODY = {"message": "Internal Server Error"}

LambdaHandler = Callable[[Dict[str, Any], Any], Dict[str, Any]]


@lru_cache(maxsize=1)
def default_validation_layer() -> ValidationLayer:
    """Validation layer for the packaged interface definition (built once per process)."""
    return ValidationLayer(load_interface_definition())


class MalformedRequestError(Exception):
    """Raised when the proxy event body cannot be decoded."""

    pass


def build_context(event: Mapping[str, Any], operation: str, lambda_context: Any = None) -> HandlerContext:
    """Build the explicit invocation context from the proxy event."""
    request_context = event.get("requestContext") or {}
    identity = request_context.get("identity") or {}
    authorizer = request_context.get("authorizer") or {}
    claims = authorizer.get("claims") or {}

    caller = (
        identity.get("user")
        or identity.get("caller")
        or claims.get("username")
        or authorizer.get("cognito:username")
        or ANONYMOUS_CALLER
    )

    request_id = (
        request_context.get("requestId")
        or getattr(lambda_context, "aws_request_id", None)
        or str(uuid.uuid4())
    )

    return HandlerContext(
        operation=operation,
        request_id=request_id,
        caller=caller,
        trace_id=_header(event, TRACE_HEADER),
    )


def convert_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Collect the raw operation input from path parameters and the JSON body.

    Path parameters take precedence over body members of the same name.

    Raises:
        MalformedRequestError: body is not valid (base64/UTF-8/JSON) content
    """
    raw: Dict[str, Any] = {}

    body = event.get("body")
    if body:
        if event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise MalformedRequestError(f"Body is not valid base64 UTF-8: {e}") from e
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedRequestError(f"Body is not valid JSON: {e.msg}") from e
        if not isinstance(parsed, dict):
            raise MalformedRequestError("Body must be a JSON object")
        raw.update(parsed)

    raw.update(event.get("pathParameters") or {})
    return raw


def to_proxy_response(outcome: Outcome) -> Dict[str, Any]:
    """Serialize an outcome into an API Gateway proxy response."""
    if isinstance(outcome, Success):
        return _response(outcome.status_code, outcome.output)

    if isinstance(outcome, Failed):
        return _response(outcome.status_code, outcome.payload, error_type=outcome.error_type)

    if isinstance(outcome, Rejected) and outcome.is_client_error:
        return _response(
            400,
            {
                "message": outcome.message,
                "fieldList": [issue.to_dict() for issue in outcome.issues],
            },
            error_type="ValidationException",
        )

    # Response-side validation failures and faults are opaque to the caller.
    return _response(500, INTERNAL_FAILURE_BODY, error_type="InternalFailure")


def make_lambda_handler(
    operation: str,
    handler: Operation,
    layer: Optional[ValidationLayer] = None,
) -> LambdaHandler:
    """
    Wrap an operation handler as a Lambda entry point.

    Usage:
        lambda_handler = make_lambda_handler("Echo", echo_operation)
    """

    @robust_lambda_logger
    def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        validation_layer = layer or default_validation_layer()
        handler_context = build_context(event, operation, context)

        try:
            raw_input = convert_event(event)
        except MalformedRequestError as e:
            logger.info(f"Malformed {operation} request: {e}", extra=handler_context.log_extra())
            outcome: Outcome = Rejected(
                message=str(e), issues=[ValidationIssue(path="/", message=str(e))]
            )
        else:
            outcome = asyncio.run(
                dispatch(validation_layer, operation, handler, raw_input, handler_context)
            )

        if isinstance(outcome, Fault):
            logger.error(
                f"{operation} invocation faulted: {outcome.reason}",
                extra=handler_context.log_extra(),
            )

        return to_proxy_response(outcome)

    lambda_handler.operation = operation  # type: ignore[attr-defined]
    return lambda_handler


def _response(status_code: int, body: Any, error_type: Optional[str] = None) -> Dict[str, Any]:
    headers = {"Content-Type": "application/json"}
    if error_type:
        headers[ERROR_TYPE_HEADER] = error_type
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body, ensure_ascii=False),
        "isBase64Encoded": False,
    }


def _header(event: Mapping[str, Any], name: str) -> Optional[str]:
    headers = event.get("headers") or {}
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None
