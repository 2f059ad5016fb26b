"""
Interface definition loader.

Where: string_wizard/contract/definition.py
What: Parse the service's OpenAPI document into immutable operation definitions.
Why: The validation layer, the handlers and the routing binder all read the same contract.
"""

import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .errors import DefinitionError, UnknownOperationError

logger = logging.getLogger(__name__)

DEFAULT_DEFINITION_PATH = Path(__file__).resolve().parent.parent / "model" / "StringWizard.openapi.json"

INTEGRATION_KEY = "x-amazon-apigateway-integration"
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")
_ERROR_SUFFIX = "ResponseContent"


class HttpBinding(BaseModel):
    """HTTP method + path template an entry is served on."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str


class ErrorDefinition(BaseModel):
    """A declared error shape of one operation."""

    model_config = ConfigDict(frozen=True)

    name: str
    status_code: int
    payload_schema: Dict[str, Any]


class OperationDefinition(BaseModel):
    """One named operation of the service."""

    model_config = ConfigDict(frozen=True)

    name: str
    binding: HttpBinding
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    success_status: int = 200
    errors: Tuple[ErrorDefinition, ...] = ()
    path_parameters: Tuple[str, ...] = ()

    def error(self, name: str) -> Optional[ErrorDefinition]:
        for err in self.errors:
            if err.name == name:
                return err
        return None


class StaticRoute(BaseModel):
    """A path+method entry answered by the gateway itself (mock integration)."""

    model_config = ConfigDict(frozen=True)

    binding: HttpBinding
    integration: Dict[str, Any]


class InterfaceDefinition(BaseModel):
    """
    Immutable service contract.

    `document` keeps the raw OpenAPI document; consumers that need to derive
    artifacts from it must copy it first.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    version: str
    operations: Dict[str, OperationDefinition]
    static_routes: Tuple[StaticRoute, ...] = ()
    document: Dict[str, Any] = Field(default_factory=dict, repr=False)

    def operation(self, name: str) -> OperationDefinition:
        try:
            return self.operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    @property
    def operation_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self.operations))


def iter_entries(document: Mapping[str, Any]) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    """Yield (path, METHOD, operation object) for every entry in the document."""
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, op in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(op, dict):
                continue
            yield path, method.upper(), op


def is_static_entry(op: Mapping[str, Any]) -> bool:
    """True when the entry is a mock integration (no handler lookup)."""
    integration = op.get(INTEGRATION_KEY)
    return isinstance(integration, dict) and integration.get("type") == "mock"


def parse_interface_definition(document: Mapping[str, Any]) -> InterfaceDefinition:
    """
    Build an InterfaceDefinition from an OpenAPI document.

    Raises:
        DefinitionError: when the document is empty, an entry lacks an operationId,
            an operationId is used twice, or a $ref cannot be resolved
    """
    if not document or not document.get("paths"):
        raise DefinitionError("Interface definition declares no paths")

    doc = copy.deepcopy(dict(document))
    info = doc.get("info") or {}

    operations: Dict[str, OperationDefinition] = {}
    static_routes = []

    for path, method, op in iter_entries(doc):
        binding = HttpBinding(method=method, path=path)

        if is_static_entry(op):
            static_routes.append(StaticRoute(binding=binding, integration=op[INTEGRATION_KEY]))
            continue

        name = op.get("operationId")
        if not name:
            raise DefinitionError(f"{method} {path} has no operationId")
        if name in operations:
            raise DefinitionError(f"Duplicate operationId: {name}")

        operations[name] = _parse_operation(doc, name, binding, op)

    static_routes.sort(key=lambda r: (r.binding.path, r.binding.method))

    return InterfaceDefinition(
        title=info.get("title", "Service"),
        version=str(info.get("version", "")),
        operations=operations,
        static_routes=tuple(static_routes),
        document=doc,
    )


def load_interface_definition(path: Optional[Path | str] = None) -> InterfaceDefinition:
    """
    Load an interface definition (JSON or YAML) from disk.

    Without a path, the packaged StringWizard definition is returned; it is only
    read once per process.
    """
    if path is None:
        return _load_default()
    return _load(Path(path))


@lru_cache(maxsize=1)
def _load_default() -> InterfaceDefinition:
    return _load(DEFAULT_DEFINITION_PATH)


def _load(path: Path) -> InterfaceDefinition:
    if not path.exists():
        raise DefinitionError(f"Interface definition not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        if path.suffix == ".json":
            document = json.loads(content)
        else:
            document = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DefinitionError(f"Failed to parse interface definition {path}: {e}") from e

    definition = parse_interface_definition(document or {})
    logger.info(
        f"Loaded {len(definition.operations)} operations from {path}",
        extra={"operations": list(definition.operation_names)},
    )
    return definition


def _parse_operation(
    doc: Mapping[str, Any], name: str, binding: HttpBinding, op: Mapping[str, Any]
) -> OperationDefinition:
    properties: Dict[str, Any] = {}
    required = []
    path_params = []

    for param in op.get("parameters") or []:
        param = _resolve(doc, param)
        if param.get("in") != "path":
            continue
        properties[param["name"]] = _resolve(doc, param.get("schema") or {"type": "string"})
        required.append(param["name"])
        path_params.append(param["name"])

    body = op.get("requestBody")
    if body:
        body_schema = _json_schema(doc, _resolve(doc, body))
        if body_schema:
            properties.update(body_schema.get("properties") or {})
            required.extend(r for r in body_schema.get("required") or [] if r not in required)

    input_schema = {"type": "object", "properties": properties, "required": required}

    output_schema: Dict[str, Any] = {"type": "object", "properties": {}}
    success_status = 200
    errors = []

    for status, raw_response in sorted((op.get("responses") or {}).items()):
        try:
            code = int(status)
        except ValueError:
            raise DefinitionError(f"{name}: unsupported response code {status!r}") from None

        response = _resolve(doc, raw_response)
        schema = _json_schema(doc, response)

        if 200 <= code < 300:
            success_status = code
            if schema:
                output_schema = schema
            continue

        ref_name = _ref_name(_deref_once(doc, raw_response))
        if not ref_name:
            raise DefinitionError(f"{name}: error response {status} must reference a named schema")
        errors.append(
            ErrorDefinition(
                name=ref_name.removesuffix(_ERROR_SUFFIX),
                status_code=code,
                payload_schema=schema or {"type": "object"},
            )
        )

    return OperationDefinition(
        name=name,
        binding=binding,
        input_schema=input_schema,
        output_schema=output_schema,
        success_status=success_status,
        errors=tuple(errors),
        path_parameters=tuple(path_params),
    )


def _json_schema(doc: Mapping[str, Any], holder: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    content = holder.get("content") or {}
    media = content.get("application/json")
    if not media or "schema" not in media:
        return None
    return _resolve(doc, media["schema"])


def _ref_name(response: Mapping[str, Any]) -> Optional[str]:
    media = (response.get("content") or {}).get("application/json") or {}
    ref = (media.get("schema") or {}).get("$ref")
    if not ref:
        return None
    return ref.rsplit("/", 1)[-1]


def _resolve(doc: Mapping[str, Any], node: Any) -> Any:
    """Resolve local `#/...` references, including nested ones."""
    if isinstance(node, dict):
        if "$ref" in node:
            ref = node["$ref"]
            if not isinstance(ref, str) or not ref.startswith("#/"):
                raise DefinitionError(f"Only local references are supported: {ref!r}")
            target: Any = doc
            for part in ref[2:].split("/"):
                if not isinstance(target, dict) or part not in target:
                    raise DefinitionError(f"Unresolvable reference: {ref}")
                target = target[part]
            return _resolve(doc, target)
        return {k: _resolve(doc, v) for k, v in node.items()}
    if isinstance(node, list):
        return [_resolve(doc, v) for v in node]
    return node


def _deref_once(doc: Mapping[str, Any], node: Any) -> Any:
    if isinstance(node, dict) and isinstance(node.get("$ref"), str):
        target: Any = doc
        for part in node["$ref"][2:].split("/"):
            target = target.get(part, {}) if isinstance(target, dict) else {}
        return target
    return node
