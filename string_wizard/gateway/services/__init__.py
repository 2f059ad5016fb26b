"""
Gateway services.

Route matching, function registry and in-process invocation.
"""

from .function_registry import FunctionRegistry
from .lambda_invoker import LambdaInvoker
from .route_matcher import RouteMatcher

__all__ = ["FunctionRegistry", "LambdaInvoker", "RouteMatcher"]
