"""
Route matching service.

Loads routing.yml and resolves the route for a request path and method.

Note:
    Provides functionality different from FastAPI's APIRouter.
    This module implements config-based route matching logic.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple
from urllib.parse import unquote

import yaml

from ..config import config
from ..core.function_name import normalize_function_name
from ..models.target_function import MockTarget, TargetRoute

logger = logging.getLogger(__name__)


class RouteMatcher:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or config.ROUTING_CONFIG_PATH
        self._routing_config: List[Dict[str, Any]] = []
        self._compiled: List[Tuple[Pattern[str], Dict[str, Any]]] = []

    def load_routing_config(self) -> List[Dict[str, Any]]:
        """
        Load routing.yml and cache it.
        """
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                cfg = yaml.safe_load(f) or {}
                self._routing_config = cfg.get("routes") or []
                logger.info(f"Loaded {len(self._routing_config)} routes from {self.config_path}")
        except FileNotFoundError:
            logger.warning(f"Warning: Routing config not found at {self.config_path}")
            self._routing_config = []
        except yaml.YAMLError as e:
            logger.error(f"Error parsing routing config: {e}")
            self._routing_config = []

        self._compiled = [
            (re.compile(self._path_to_regex(route.get("path", ""))), route)
            for route in self._routing_config
        ]
        return self._routing_config

    def _path_to_regex(self, path_pattern: str) -> str:
        """
        Convert a path pattern to a regular expression.

        Example: "/length/{string}"
            → "^/length/(?P<string>[^/]+)$"
        """
        # Replace {param} with named capture groups.
        regex_pattern = re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", path_pattern)
        return f"^{regex_pattern}$"

    def match_route(self, request_path: str, request_method: str) -> Optional[TargetRoute]:
        """
        Resolve the route for a request.

        Segments are matched before decoding, so an encoded "/" stays inside
        its path parameter.

        Args:
            request_path: raw, still percent-encoded request path
                (e.g., "/length/a%3Fb")
            request_method: HTTP method (e.g., "GET")

        Returns:
            TargetRoute, or None when no route matches
        """
        if not self._compiled:
            self.load_routing_config()

        for regex, route in self._compiled:
            if request_method.upper() != str(route.get("method", "")).upper():
                continue

            match = regex.match(request_path)
            if not match:
                continue

            target = TargetRoute(
                route_path=route.get("path", ""),
                method=request_method.upper(),
                path_params={name: unquote(value) for name, value in match.groupdict().items()},
                operation=route.get("operation"),
            )

            if route.get("mock") is not None:
                target.mock = MockTarget(**(route.get("mock") or {}))
                return target

            function_ref = route.get("function") or route.get("uri")
            if function_ref:
                target.function_name = normalize_function_name(function_ref).name
            return target

        # No matching route found.
        return None
