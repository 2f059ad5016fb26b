"""
routing.yml / functions.yml Renderer

Render the gateway configuration from the routing table and the parsed functions.
"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from jinja2 import Environment, FileSystemLoader

from .binder import RoutingTable
from .parser import DEFAULT_TIMEOUT

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_routing_yml(table: RoutingTable) -> str:
    """
    Render routing.yml.

    Args:
        table: routing table produced by the binder

    Returns:
        routing.yml string
    """
    template = _environment().get_template("routing.yml.j2")
    return template.render(title=table.title, version=table.version, routes=table.routes)


def render_functions_yml(functions: list[dict], defaults: Mapping[str, Any] | None = None) -> str:
    """
    Render functions.yml.

    Args:
        functions: list of functions
            - name: function name
            - operation: bound operation
            - entry_point: importable handler path
            - timeout, memory_size: invocation limits

    Returns:
        functions.yml string
    """
    template = _environment().get_template("functions.yml.j2")
    ordered = sorted(functions, key=lambda f: f["name"])
    return template.render(
        functions=ordered,
        defaults={"timeout": DEFAULT_TIMEOUT, **(defaults or {})},
    )


def render_json(document: Dict[str, Any]) -> str:
    """Stable JSON rendering for the bound interface definition and the policy."""
    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
