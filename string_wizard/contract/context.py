"""
Invocation context.

Created by the entry point for one invocation and passed explicitly to the
handler; never stored between invocations.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

ANONYMOUS_CALLER = "anonymous"


class HandlerContext(BaseModel):
    """Caller identity and correlation metadata of a single invocation."""

    model_config = ConfigDict(frozen=True)

    operation: str
    request_id: str
    caller: str = ANONYMOUS_CALLER
    trace_id: Optional[str] = None

    def log_extra(self) -> dict:
        """Correlation fields for `logger.*(..., extra=...)`."""
        return {
            "operation": self.operation,
            "caller": self.caller,
            "aws_request_id": self.request_id,
            "trace_id": self.trace_id,
        }
