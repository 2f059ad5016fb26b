"""
Input context models.

Encapsulates all data required to build the event for one routed request.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class InputContext(BaseModel):
    """
    Context representing an incoming request.

    This model decouples the event builder from FastAPI's Request object.
    """

    method: str
    path: str
    headers: Dict[str, str]
    multi_headers: Dict[str, List[str]] = Field(default_factory=dict)
    query_params: Dict[str, str] = Field(default_factory=dict)
    multi_query_params: Dict[str, List[str]] = Field(default_factory=dict)
    body: bytes = b""
    caller: Optional[str] = None
    request_id: str
    source_ip: Optional[str] = None
    operation: Optional[str] = None
    path_params: Dict[str, str] = Field(default_factory=dict)
    route_path: Optional[str] = None
