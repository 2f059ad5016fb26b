"""
X-Ray style trace ids carried in the X-Amzn-Trace-Id header.
"""

import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional

_ROOT_PATTERN = re.compile(r"^1-[0-9a-f]{8}-[0-9a-f]{24}$")


@dataclass(frozen=True)
class TraceId:
    """
    Header format: Root=1-{epoch hex}-{96 bit random hex};Parent={id};Sampled={0|1}
    """

    root: str
    parent: Optional[str] = None
    sampled: Optional[str] = "1"

    @classmethod
    def generate(cls) -> "TraceId":
        return cls(root=f"1-{int(time.time()):08x}-{secrets.token_hex(12)}")

    @classmethod
    def parse(cls, header: str) -> "TraceId":
        """
        Parse an X-Amzn-Trace-Id header.

        A bare root id (no `Root=`) is accepted.

        Raises:
            ValueError: the root id is missing or malformed
        """
        fields = dict(
            (key.strip(), value.strip())
            for key, sep, value in (part.partition("=") for part in header.split(";"))
            if sep
        )
        root = fields.get("Root") or (header.strip() if "=" not in header else "")

        if not _ROOT_PATTERN.match(root):
            raise ValueError(f"Invalid trace header: {header!r}")

        return cls(root=root, parent=fields.get("Parent"), sampled=fields.get("Sampled", "1"))

    def __str__(self) -> str:
        parts = [f"Root={self.root}"]
        if self.parent:
            parts.append(f"Parent={self.parent}")
        if self.sampled:
            parts.append(f"Sampled={self.sampled}")
        return ";".join(parts)
