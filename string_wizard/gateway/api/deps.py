"""
Dependency Injection for Gateway API.

Manage request handler dependencies using FastAPI Depends.
"""

from typing import Annotated
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request

from string_wizard.contract import ANONYMOUS_CALLER

from ..config import config
from ..core.event_builder import EventBuilder
from ..models.target_function import TargetRoute
from ..services.lambda_invoker import LambdaInvoker
from ..services.route_matcher import RouteMatcher

# ==========================================
# 1. Service Accessors
# ==========================================


def get_route_matcher(request: Request) -> RouteMatcher:
    return request.app.state.route_matcher


def get_lambda_invoker(request: Request) -> LambdaInvoker:
    return request.app.state.lambda_invoker


def get_event_builder(request: Request) -> EventBuilder:
    return request.app.state.event_builder


# Service Dependency Type Aliases
RouteMatcherDep = Annotated[RouteMatcher, Depends(get_route_matcher)]
LambdaInvokerDep = Annotated[LambdaInvoker, Depends(get_lambda_invoker)]
EventBuilderDep = Annotated[EventBuilder, Depends(get_event_builder)]


# ==========================================
# 2. Logic Dependencies (Resolution)
# ==========================================


def raw_request_path(request: Request) -> str:
    """
    Request path as sent, still percent-encoded, without the root path.

    request.url.path is decoded and then re-parsed, which truncates a path
    parameter at an encoded "?" or "#" and drops encoded tabs and newlines.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return quote(request.scope["path"])

    path = raw_path.decode("latin-1")
    root_path = request.scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path) :]
    return path or "/"


async def resolve_caller(request: Request) -> str:
    """
    Caller identity forwarded to the function.

    Authentication happens in front of the gateway; the identity arrives in
    config.CALLER_HEADER.
    """
    return request.headers.get(config.CALLER_HEADER) or ANONYMOUS_CALLER


async def resolve_route_target(request: Request, route_matcher: RouteMatcherDep) -> TargetRoute:
    """
    Resolve the route from the request path.

    Args:
        request: FastAPI Request object
        route_matcher: RouteMatcher service (DI)

    Returns:
        TargetRoute: function to invoke or static response

    Raises:
        HTTPException: 404 when no route matches
    """
    target = route_matcher.match_route(raw_request_path(request), request.method)

    if target is None or (target.mock is None and not target.function_name):
        raise HTTPException(status_code=404, detail="Not Found")

    return target


# Logic Dependency Type Aliases
CallerDep = Annotated[str, Depends(resolve_caller)]
RouteTargetDep = Annotated[TargetRoute, Depends(resolve_route_target)]
