"""
Gateway Utility Module
"""

import base64
import binascii
import json
import logging
from typing import Any

from ..models.result import InvocationResult

logger = logging.getLogger("gateway.utils")


class InvalidProxyResponseError(ValueError):
    """Raised when a function returns something that is not a proxy response."""

    pass


def parse_lambda_response(lambda_response: Any) -> InvocationResult:
    """
    Convert a function's proxy response into an InvocationResult.

    Args:
        lambda_response: value returned by the function entry point

    Returns:
        InvocationResult with the body as bytes

    Raises:
        InvalidProxyResponseError: response is not usable
    """
    # When the function uses the API Gateway proxy format.
    if isinstance(lambda_response, dict) and "statusCode" in lambda_response:
        try:
            status_code = int(lambda_response["statusCode"])
        except (TypeError, ValueError) as e:
            raise InvalidProxyResponseError(
                f"Invalid statusCode: {lambda_response['statusCode']!r}"
            ) from e

        headers = {str(k): str(v) for k, v in (lambda_response.get("headers") or {}).items()}
        body = lambda_response.get("body")

        if body is None:
            content = b""
        elif not isinstance(body, str):
            # Some handlers return a structure instead of a serialized body.
            content = json.dumps(body, ensure_ascii=False).encode("utf-8")
        elif lambda_response.get("isBase64Encoded"):
            try:
                content = base64.b64decode(body)
            except binascii.Error as e:
                raise InvalidProxyResponseError(f"Body is not valid base64: {e}") from e
        else:
            content = body.encode("utf-8")

        return InvocationResult(status_code=status_code, body=content, headers=headers)

    # Bare value: pass through as JSON.
    logger.warning(
        "Function returned a non-proxy response. Wrapping it as JSON.",
        extra={"response_type": type(lambda_response).__name__},
    )
    try:
        content = json.dumps(lambda_response, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidProxyResponseError(f"Response is not JSON serializable: {e}") from e
    return InvocationResult(
        status_code=200, body=content, headers={"Content-Type": "application/json"}
    )
