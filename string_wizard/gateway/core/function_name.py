"""
Where: string_wizard/gateway/core/function_name.py
What: Extract function names from routing addresses.
Why: A route may carry only its integration URI; the registry is keyed by name.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote

_FULL_ARN_PATTERN = re.compile(
    r"^arn:[^:]+:lambda:[^:]+:\d{12}:function:(?P<name>[^:/]+)(?::(?P<qualifier>[^:/]+))?$"
)
_INVOCATION_URI_PATTERN = re.compile(
    r"^arn:[^:]+:apigateway:[^:]+:lambda:path/[^/]+/functions/(?P<arn>.+)/invocations$"
)


@dataclass(frozen=True)
class NormalizedFunctionName:
    original: str
    name: str
    qualifier: str | None = None


def normalize_function_name(function_ref: str) -> NormalizedFunctionName:
    """
    Normalize a routing function reference.

    Supported inputs:
    - function name (`string-wizard-prod-echo`)
    - full ARN (`arn:aws:lambda:region:account:function:name[:qualifier]`)
    - API Gateway integration URI
      (`arn:aws:apigateway:region:lambda:path/2015-03-31/functions/<arn>/invocations`)
    """
    normalized = unquote(function_ref).strip()
    if not normalized:
        raise ValueError("Function reference is required")

    uri_match = _INVOCATION_URI_PATTERN.match(normalized)
    if uri_match:
        inner = normalize_function_name(uri_match.group("arn"))
        return NormalizedFunctionName(original=normalized, name=inner.name, qualifier=inner.qualifier)

    full_match = _FULL_ARN_PATTERN.match(normalized)
    if full_match:
        return NormalizedFunctionName(
            original=normalized,
            name=full_match.group("name"),
            qualifier=full_match.group("qualifier"),
        )

    return NormalizedFunctionName(original=normalized, name=normalized)
