"""
Shape model generation.

Turns the JSON-schema shapes of the interface definition into pydantic models so
structural validation is derived from the contract instead of written by hand.
"""

import re
from typing import Any, Dict, List, Literal, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

from .errors import DefinitionError

_SCALAR_TYPES: Dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
}


class ShapeModel(BaseModel):
    """Base of every generated shape: strict types, unknown members ignored."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


def build_shape_model(name: str, schema: Mapping[str, Any]) -> Type[ShapeModel]:
    """
    Create a pydantic model class for an object schema.

    Supported keywords: type, properties, required, items, pattern, minLength,
    maxLength, minimum, maximum, enum.
    """
    if schema.get("type", "object") != "object":
        raise DefinitionError(f"Shape {name} must be an object schema")

    required = set(schema.get("required") or [])
    fields: Dict[str, Any] = {}

    for member, member_schema in (schema.get("properties") or {}).items():
        annotation = _annotation(f"{name}{_camel(member)}", member_schema)
        constraints = _constraints(member_schema)
        if member in required:
            fields[member] = (annotation, Field(..., **constraints))
        else:
            fields[member] = (Optional[annotation], Field(None, **constraints))

    return create_model(_safe_name(name), __base__=ShapeModel, **fields)


def _annotation(name: str, schema: Mapping[str, Any]) -> Any:
    if "enum" in schema:
        return Literal[tuple(schema["enum"])]  # type: ignore[valid-type]
    schema_type = schema.get("type")
    if schema_type in _SCALAR_TYPES:
        return _SCALAR_TYPES[schema_type]
    if schema_type == "array":
        return List[_annotation(name + "Item", schema.get("items") or {})]  # type: ignore[misc]
    if schema_type == "object" or "properties" in schema:
        return build_shape_model(name, schema)
    if schema_type is None:
        return Any
    raise DefinitionError(f"Unsupported schema type {schema_type!r} in {name}")


def _constraints(schema: Mapping[str, Any]) -> Dict[str, Any]:
    constraints: Dict[str, Any] = {}
    if "pattern" in schema:
        constraints["pattern"] = schema["pattern"]
    if "minLength" in schema:
        constraints["min_length"] = schema["minLength"]
    if "maxLength" in schema:
        constraints["max_length"] = schema["maxLength"]
    if "minimum" in schema:
        constraints["ge"] = schema["minimum"]
    if "maximum" in schema:
        constraints["le"] = schema["maximum"]
    return constraints


def _camel(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^a-zA-Z0-9]+", value) if part)


def _safe_name(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", value) or "Shape"
