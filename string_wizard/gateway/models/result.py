"""
Invocation result models.

Standardizes the output of the function invocation pipeline.
"""

from typing import Dict

from pydantic import BaseModel, Field


class InvocationResult(BaseModel):
    """
    Unified result of a function invocation.

    Used to decouple the internal pipeline from FastAPI Response objects.
    """

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def error_type(self) -> str | None:
        """Declared error name reported by the function, if any."""
        for key, value in self.headers.items():
            if key.lower() == "x-amzn-errortype":
                return value
        return None
