"""
StringWizard Gateway - API Gateway compatible server

Serves the routes generated from the interface definition (routing.yml) and
invokes the bound function for each one. Static (mock) routes are answered by
the gateway itself.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from urllib.parse import unquote

from fastapi import FastAPI, Request
from fastapi.responses import Response

from string_wizard.common.core.trace import TraceId

from .api.deps import (
    CallerDep,
    EventBuilderDep,
    LambdaInvokerDep,
    RouteTargetDep,
    raw_request_path,
)
from .config import config
from .core.event_builder import V1ProxyEventBuilder
from .core.exceptions import register_exception_handlers
from .core.logging_config import setup_logging
from .models.context import InputContext
from .services.function_registry import FunctionRegistry
from .services.lambda_invoker import LambdaInvoker
from .services.route_matcher import RouteMatcher

# Logger setup
setup_logging()
logger = logging.getLogger("gateway.main")

TRACE_HEADER = "X-Amzn-Trace-Id"
REQUEST_ID_HEADER = "x-amzn-RequestId"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    function_registry = FunctionRegistry()
    route_matcher = RouteMatcher()

    # Load initial configs
    function_registry.load_functions_config()
    route_matcher.load_routing_config()

    # Store in app.state for DI
    app.state.function_registry = function_registry
    app.state.route_matcher = route_matcher
    app.state.lambda_invoker = LambdaInvoker(registry=function_registry, config=config)
    app.state.event_builder = V1ProxyEventBuilder()

    logger.info("Gateway initialized.", extra={"functions": function_registry.function_names()})

    yield

    logger.info("Gateway shutting down.")


app = FastAPI(
    title="StringWizard Gateway", version="1.0.0", lifespan=lifespan, root_path=config.root_path
)


# ===========================================
# Middleware
# ===========================================


@app.middleware("http")
async def trace_propagation_middleware(request: Request, call_next):
    """
    Middleware for Trace ID propagation and structured access logging.

    The ids are stored on request.state and passed on explicitly.
    """
    start_time = time.perf_counter()

    # Get or generate Trace ID.
    trace_id_str = request.headers.get(TRACE_HEADER)

    if trace_id_str:
        try:
            TraceId.parse(trace_id_str)
        except ValueError as e:
            logger.warning(f"Failed to parse incoming {TRACE_HEADER}: '{trace_id_str}', error: {e}")
            # Force regeneration on invalid format.
            trace_id_str = str(TraceId.generate())
    else:
        trace_id_str = str(TraceId.generate())

    # Request ID is independent of Trace ID.
    req_id = str(uuid.uuid4())

    request.state.trace_id = trace_id_str
    request.state.request_id = req_id
    request.state.error_type = None

    response = await call_next(request)

    response.headers[TRACE_HEADER] = trace_id_str
    response.headers[REQUEST_ID_HEADER] = req_id

    path = raw_request_path(request)
    process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

    # Structured Access Log
    logger.info(
        f"{request.method} {path} {response.status_code}",
        extra={
            "trace_id": trace_id_str,
            "aws_request_id": req_id,
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "error_type": request.state.error_type,
            "latency_ms": process_time_ms,
            "user_agent": request.headers.get("user-agent"),
            "client_ip": request.client.host if request.client else None,
        },
    )

    return response


# Register exception handlers.
register_exception_handlers(app)


# ===========================================
# Endpoint definitions.
# ===========================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
async def gateway_handler(
    request: Request,
    path: str,
    caller: CallerDep,
    target: RouteTargetDep,
    event_builder: EventBuilderDep,
    invoker: LambdaInvokerDep,
):
    """
    Catch-all route: dispatch to the bound function based on routing.yml.

    Routing resolution is handled via DI.
    """
    if target.mock is not None:
        return Response(
            content=target.mock.body,
            status_code=target.mock.status_code,
            headers=target.mock.headers,
        )

    body = await request.body()
    headers = dict(request.headers)
    headers[TRACE_HEADER.lower()] = request.state.trace_id

    event = event_builder.build(
        InputContext(
            method=request.method,
            path=unquote(raw_request_path(request)),
            headers=headers,
            multi_headers={k: request.headers.getlist(k) for k in request.headers.keys()},
            query_params=dict(request.query_params),
            multi_query_params={
                k: request.query_params.getlist(k) for k in request.query_params.keys()
            },
            body=body,
            caller=caller,
            request_id=request.state.request_id,
            source_ip=request.client.host if request.client else None,
            operation=target.operation,
            path_params=target.path_params,
            route_path=target.route_path,
        )
    )

    result = await invoker.invoke_function(target.function_name, event, request.state.request_id)
    request.state.error_type = result.error_type

    return Response(content=result.body, status_code=result.status_code, headers=result.headers)


def run():
    """Console entry point."""
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(app, host=host or "0.0.0.0", port=int(port))


if __name__ == "__main__":
    run()
