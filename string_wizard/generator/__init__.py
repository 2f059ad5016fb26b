"""
Routing generator package.

Build-time binding of the interface definition to the deployed functions.
"""

from .binder import (
    BindingError,
    HandlerBinding,
    RouteEntry,
    RoutingTable,
    bind_interface_definition,
    build_routing_table,
    collect_handler_bindings,
)

__all__ = [
    "BindingError",
    "HandlerBinding",
    "RouteEntry",
    "RoutingTable",
    "bind_interface_definition",
    "build_routing_table",
    "collect_handler_bindings",
]
