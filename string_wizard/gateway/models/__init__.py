"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .aws_v1 import APIGatewayProxyEvent
from .context import InputContext
from .result import InvocationResult
from .target_function import MockTarget, TargetRoute

__all__ = [
    "APIGatewayProxyEvent",
    "InputContext",
    "InvocationResult",
    "MockTarget",
    "TargetRoute",
]
