"""
Gateway configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pathlib import Path

from pydantic import Field

from string_wizard.common.core.config import BaseAppConfig

_PACKAGE_DIR = Path(__file__).resolve().parent


class GatewayConfig(BaseAppConfig):
    """
    Configuration management for the Gateway service.
    """

    # Server settings
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8000", description="Listen address")

    # Path settings (generated by string-wizard-generate)
    ROUTING_CONFIG_PATH: str = Field(
        default=".wizard/config/routing.yml", description="Routing definition file path"
    )
    FUNCTIONS_CONFIG_PATH: str = Field(
        default=".wizard/config/functions.yml", description="Function registry file path"
    )
    LOG_CONFIG_PATH: str = Field(
        default=str(_PACKAGE_DIR / "logging.yml"), description="YAML dictConfig file for logging"
    )

    # Invocation
    LAMBDA_INVOKE_TIMEOUT: float = Field(
        default=30.0, description="Default invoke timeout when a function sets none (seconds)"
    )
    CALLER_HEADER: str = Field(
        default="x-caller-id", description="Request header carrying the caller identity"
    )

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = GatewayConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
