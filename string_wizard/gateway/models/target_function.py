from typing import Dict, Optional

from pydantic import BaseModel, Field


class MockTarget(BaseModel):
    """Static response served by the gateway itself."""

    status_code: int = 200
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""


class TargetRoute(BaseModel):
    """
    Route resolved for a request: a function to invoke, or a static response.
    """

    route_path: str
    method: str
    path_params: Dict[str, str] = Field(default_factory=dict)
    operation: Optional[str] = None
    function_name: Optional[str] = None
    mock: Optional[MockTarget] = None
