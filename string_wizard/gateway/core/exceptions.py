"""
Custom exception classes.

Represent errors raised while invoking a function behind a route. None of them
carries detail to the caller; the cause is logged.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LambdaInvokeError(Exception):
    """Base exception class for function invocation."""

    pass


class FunctionNotFoundError(LambdaInvokeError):
    """Raised when a routed function is missing from the registry."""

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"Function not found: {function_name}")


class LambdaExecutionError(LambdaInvokeError):
    """Raised when the function entry point fails or returns an invalid response."""

    def __init__(self, function_name: str, cause: Exception):
        self.function_name = function_name
        self.cause = cause
        super().__init__(f"Execution failed for {function_name}: {cause}")


class InvocationTimeoutError(LambdaInvokeError):
    """Raised when the function does not answer before its deadline."""

    def __init__(self, function_name: str, timeout: float):
        self.function_name = function_name
        self.timeout = timeout
        super().__init__(f"Function {function_name} timed out after {timeout}s")


# ===========================================
# Exception Handlers
# ===========================================


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=exc,
        extra={
            "path": request.url.path,
            "method": request.method,
            "aws_request_id": getattr(request.state, "request_id", None),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


async def function_not_found_handler(request: Request, exc: FunctionNotFoundError):
    # The routing table and the registry disagree: a deployment problem.
    logger.error(
        str(exc),
        extra={"function_name": exc.function_name, "path": request.url.path},
    )
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"message": "Bad Gateway"})


async def lambda_execution_error_handler(request: Request, exc: LambdaExecutionError):
    logger.error(
        str(exc),
        exc_info=exc.cause,
        extra={
            "function_name": exc.function_name,
            "error_type": type(exc.cause).__name__,
            "aws_request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY, content={"message": "Internal server error"}
    )


async def invocation_timeout_handler(request: Request, exc: InvocationTimeoutError):
    logger.error(
        str(exc),
        extra={
            "function_name": exc.function_name,
            "timeout": exc.timeout,
            "aws_request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={"message": "Endpoint request timed out"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(FunctionNotFoundError, function_not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(LambdaExecutionError, lambda_execution_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvocationTimeoutError, invocation_timeout_handler)  # type: ignore[arg-type]
