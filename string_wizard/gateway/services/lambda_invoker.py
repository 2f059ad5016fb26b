"""
Lambda Invoker Service

Runs a deployed function's entry point in-process with an API Gateway proxy
event and a Lambda-style context object.
"""

import asyncio
import importlib
import logging
import time
from typing import Any, Callable, Dict

from ..config import GatewayConfig
from ..core.exceptions import (
    FunctionNotFoundError,
    InvocationTimeoutError,
    LambdaExecutionError,
)
from ..core.utils import InvalidProxyResponseError, parse_lambda_response
from ..models.result import InvocationResult
from .function_registry import FunctionRegistry

logger = logging.getLogger("gateway.lambda_invoker")

EntryPoint = Callable[[Dict[str, Any], Any], Any]


class LambdaContext:
    """Subset of the Lambda context object handed to entry points."""

    def __init__(self, function_name: str, aws_request_id: str, timeout: float, memory_limit_in_mb: int = 128):
        self.function_name = function_name
        self.function_version = "$LATEST"
        self.aws_request_id = aws_request_id
        self.memory_limit_in_mb = memory_limit_in_mb
        self._deadline = time.monotonic() + timeout

    def get_remaining_time_in_millis(self) -> int:
        return max(0, int((self._deadline - time.monotonic()) * 1000))


def load_entry_point(handler: str) -> EntryPoint:
    """
    Import "package.module.function" and return the function.

    Raises:
        ImportError: module cannot be imported or has no such attribute
    """
    module_name, _, attr = handler.rpartition(".")
    if not module_name:
        raise ImportError(f"Handler must be module.function: {handler}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"{module_name} has no attribute {attr}") from e


class LambdaInvoker:
    def __init__(self, registry: FunctionRegistry, config: GatewayConfig):
        """
        Args:
            registry: FunctionRegistry instance
            config: GatewayConfig instance
        """
        self.registry = registry
        self.config = config
        self._entry_points: Dict[str, EntryPoint] = {}

    def _resolve_entry_point(self, function_name: str, handler: str) -> EntryPoint:
        # Modules stay loaded between invocations, as in a warm container.
        if function_name not in self._entry_points:
            try:
                self._entry_points[function_name] = load_entry_point(handler)
            except ImportError as e:
                raise LambdaExecutionError(function_name, e) from e
        return self._entry_points[function_name]

    async def invoke_function(
        self, function_name: str, event: Dict[str, Any], request_id: str
    ) -> InvocationResult:
        """
        Invoke a function.

        Args:
            function_name: deployed function name
            event: API Gateway proxy event
            request_id: request id handed to the function context

        Returns:
            Parsed proxy response

        Raises:
            FunctionNotFoundError: function is not in the registry
            LambdaExecutionError: entry point failed or returned an invalid response
            InvocationTimeoutError: no answer before the function timeout
        """
        func_config = self.registry.get_function_config(function_name)
        if func_config is None:
            raise FunctionNotFoundError(function_name)

        handler = func_config.get("handler")
        if not handler:
            raise LambdaExecutionError(function_name, ValueError("No handler configured"))
        entry_point = self._resolve_entry_point(function_name, handler)

        timeout = float(func_config.get("timeout") or self.config.LAMBDA_INVOKE_TIMEOUT)
        context = LambdaContext(
            function_name=function_name,
            aws_request_id=request_id,
            timeout=timeout,
            memory_limit_in_mb=int(func_config.get("memory_size") or 128),
        )

        logger.info(
            f"Invoking {function_name}",
            extra={"function_name": function_name, "aws_request_id": request_id},
        )

        try:
            # On timeout the worker thread is abandoned, not killed.
            response = await asyncio.wait_for(
                asyncio.to_thread(entry_point, event, context), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise InvocationTimeoutError(function_name, timeout) from e
        except Exception as e:
            raise LambdaExecutionError(function_name, e) from e

        try:
            return parse_lambda_response(response)
        except InvalidProxyResponseError as e:
            raise LambdaExecutionError(function_name, e) from e
