"""
Function registry.

Reads the functions.yml written by the generator. `defaults` fill whatever a
function leaves unset.
"""

import logging
from typing import Any, Dict, Optional

import yaml

from ..config import config

logger = logging.getLogger("gateway.function_registry")


class FunctionRegistry:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or config.FUNCTIONS_CONFIG_PATH
        self._functions: Dict[str, Dict[str, Any]] = {}
        self._defaults: Dict[str, Any] = {}

    def load_functions_config(self) -> Dict[str, Dict[str, Any]]:
        """
        (Re)load functions.yml.

        A missing or unparsable file leaves the registry empty; every route
        then answers 502 until the generator has run.
        """
        self._functions, self._defaults = {}, {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Functions config not found at {self.config_path}")
            return self._functions
        except yaml.YAMLError as e:
            logger.error(f"Error parsing functions config {self.config_path}: {e}")
            return self._functions

        self._defaults = document.get("defaults") or {}
        self._functions = document.get("functions") or {}
        logger.info(
            f"Loaded {len(self._functions)} functions from {self.config_path}",
            extra={"functions": sorted(self._functions)},
        )
        return self._functions

    def function_names(self) -> list[str]:
        return sorted(self._functions)

    def get_function_config(self, function_name: str) -> Optional[Dict[str, Any]]:
        """Effective config of one function, or None when it is not registered."""
        if function_name not in self._functions:
            return None

        return {**self._defaults, **(self._functions[function_name] or {})}
