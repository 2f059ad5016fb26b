"""
Pydantic models for AWS API Gateway v1 (REST API) event structure.

Reference: https://docs.aws.amazon.com/apigateway/latest/developerguide/set-up-lambda-proxy-integrations.html#api-gateway-simple-proxy-for-lambda-input-format

Use model_dump(exclude_none=True) to convert to the event dict.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel


class ApiGatewayIdentity(BaseModel):
    """API Gateway Identity object."""

    sourceIp: str
    userAgent: Optional[str] = None
    user: Optional[str] = None


class ApiGatewayRequestContext(BaseModel):
    """API Gateway Request Context object."""

    identity: ApiGatewayIdentity
    requestId: str
    resourcePath: Optional[str] = None
    operationName: Optional[str] = None
    httpMethod: Optional[str] = None
    stage: str = "prod"
    path: Optional[str] = None
    protocol: str = "HTTP/1.1"


class APIGatewayProxyEvent(BaseModel):
    """
    AWS API Gateway Proxy Integration (v1) Event Structure
    """

    resource: str
    path: str
    httpMethod: str
    headers: Dict[str, str]
    multiValueHeaders: Dict[str, List[str]]
    queryStringParameters: Optional[Dict[str, str]] = None
    multiValueQueryStringParameters: Optional[Dict[str, List[str]]] = None
    pathParameters: Optional[Dict[str, str]] = None
    stageVariables: Optional[Dict[str, str]] = None
    requestContext: ApiGatewayRequestContext
    body: Optional[str] = None
    isBase64Encoded: bool = False
