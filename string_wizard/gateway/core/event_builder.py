"""
Proxy event construction.

Translates the gateway's view of a request (InputContext) into the API Gateway
v1 proxy event the function entry points expect. Caller identity and request
id come from the context, never from ambient state.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple

from string_wizard.contract import ANONYMOUS_CALLER

from ..models.aws_v1 import (
    ApiGatewayIdentity,
    APIGatewayProxyEvent,
    ApiGatewayRequestContext,
)
from ..models.context import InputContext

logger = logging.getLogger("gateway.event_builder")


def encode_body(body: bytes, headers: Mapping[str, str]) -> Tuple[Optional[str], bool]:
    """
    Return (event body, isBase64Encoded).

    gzip payloads and anything that is not UTF-8 travel base64 encoded.
    """
    if not body:
        return None, False

    if "gzip" not in headers.get("content-encoding", "").lower():
        try:
            return body.decode("utf-8"), False
        except UnicodeDecodeError:
            pass

    return base64.b64encode(body).decode("ascii"), True


class EventBuilder(ABC):
    @abstractmethod
    def build(self, context: InputContext) -> Dict[str, Any]:
        pass


class V1ProxyEventBuilder(EventBuilder):
    """REST API (v1) proxy integration events."""

    def __init__(self, stage: str = "prod"):
        self.stage = stage

    def build(self, context: InputContext) -> Dict[str, Any]:
        resource = context.route_path or context.path
        body, is_base64 = encode_body(context.body, context.headers)

        identity = ApiGatewayIdentity(
            sourceIp=context.headers.get("x-forwarded-for") or context.source_ip or "unknown",
            userAgent=context.headers.get("user-agent"),
            user=context.caller or ANONYMOUS_CALLER,
        )
        request_context = ApiGatewayRequestContext(
            identity=identity,
            requestId=context.request_id,
            resourcePath=resource,
            operationName=context.operation,
            httpMethod=context.method,
            stage=self.stage,
            path=context.path,
        )

        event = APIGatewayProxyEvent(
            resource=resource,
            path=context.path,
            httpMethod=context.method,
            headers=context.headers,
            multiValueHeaders=context.multi_headers,
            # API Gateway sends null, not {}, when a collection is empty.
            queryStringParameters=context.query_params or None,
            multiValueQueryStringParameters=context.multi_query_params or None,
            pathParameters=context.path_params or None,
            requestContext=request_context,
            body=body,
            isBase64Encoded=is_base64,
        )
        return event.model_dump(exclude_none=True)
