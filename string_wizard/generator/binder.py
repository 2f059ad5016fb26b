"""
Routing binder.

Where: string_wizard/generator/binder.py
What: Bind every operation of the interface definition to its deployed function and
      derive the gateway routing table.
Why: The gateway-to-handler binding is generated from the contract, never hand-edited.

This is a build-time transform. A declared operation without a deployed function
is a deployment failure (BindingError), not a runtime 404.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from string_wizard.contract.definition import (
    INTEGRATION_KEY,
    InterfaceDefinition,
    is_static_entry,
    iter_entries,
)

logger = logging.getLogger(__name__)

LAMBDA_INVOKE_PATH = "path/2015-03-31/functions/{function_arn}/invocations"
_HEADER_PREFIX = "method.response.header."


class BindingError(Exception):
    """Raised when the deployed handler set does not satisfy the interface definition."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class HandlerBinding(BaseModel):
    """A deployed function and the address the gateway invokes it at."""

    model_config = ConfigDict(frozen=True)

    operation: str
    function_name: str
    function_arn: str
    uri: str


class MockResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int = 200
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""


class RouteEntry(BaseModel):
    """One path+method of the routing table: either dispatched or static."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str
    operation: Optional[str] = None
    function: Optional[str] = None
    uri: Optional[str] = None
    mock: Optional[MockResponse] = None

    @property
    def is_static(self) -> bool:
        return self.mock is not None


class RoutingTable(BaseModel):
    """Read-only routing configuration, ordered by (path, method)."""

    model_config = ConfigDict(frozen=True)

    title: str
    version: str
    routes: Tuple[RouteEntry, ...]

    def addresses(self) -> Dict[str, str]:
        """Operation -> invocation address."""
        return {r.operation: r.uri for r in self.routes if r.operation and r.uri}


def function_arn(function_name: str, partition: str, region: str, account_id: str) -> str:
    return f"arn:{partition}:lambda:{region}:{account_id}:function:{function_name}"


def invocation_uri(function_arn_value: str, partition: str, region: str) -> str:
    """API Gateway integration URI for a Lambda proxy integration."""
    path = LAMBDA_INVOKE_PATH.format(function_arn=function_arn_value)
    return f"arn:{partition}:apigateway:{region}:lambda:{path}"


def collect_handler_bindings(
    functions: Iterable[Mapping[str, Any]], parameters: Mapping[str, str]
) -> Dict[str, HandlerBinding]:
    """
    Key the deployed functions by operation name.

    Raises:
        BindingError: two functions claim the same operation
    """
    partition = parameters.get("AWS::Partition", "aws")
    region = parameters.get("AWS::Region", "us-east-1")
    account_id = parameters.get("AWS::AccountId", "123456789012")

    bindings: Dict[str, HandlerBinding] = {}
    for func in functions:
        operation = func["operation"]
        if operation in bindings:
            raise BindingError(
                f"Operation {operation} is bound to both "
                f"{bindings[operation].function_name} and {func['name']}",
                operation=operation,
            )
        arn = function_arn(func["name"], partition, region, account_id)
        bindings[operation] = HandlerBinding(
            operation=operation,
            function_name=func["name"],
            function_arn=arn,
            uri=invocation_uri(arn, partition, region),
        )
    return bindings


def bind_interface_definition(
    document: Mapping[str, Any], addresses: Mapping[str, str]
) -> Dict[str, Any]:
    """
    Return a copy of the OpenAPI document with every dispatch entry's
    integration URI pointing at its handler address.

    Raises:
        BindingError: a dispatch-requiring operation has no address
    """
    bound = copy.deepcopy(dict(document))

    for path, method, op in iter_entries(bound):
        # Don't try to mess with mock integrations.
        if is_static_entry(op):
            continue

        operation = op.get("operationId")
        address = addresses.get(operation) if operation else None
        if not address:
            raise BindingError(f"No function for {operation} ({method} {path})", operation=operation)

        integration = op.get(INTEGRATION_KEY)
        if not isinstance(integration, dict):
            integration = {"type": "aws_proxy", "httpMethod": "POST"}
            op[INTEGRATION_KEY] = integration
        integration["uri"] = address

    return bound


def build_routing_table(
    definition: InterfaceDefinition, bindings: Mapping[str, HandlerBinding]
) -> RoutingTable:
    """
    Derive the gateway routing table.

    The result depends only on the contents of both inputs, never on their
    iteration order.

    Raises:
        BindingError: a declared operation has no deployed function
    """
    declared = set(definition.operations)
    for extra in sorted(set(bindings) - declared):
        logger.warning(
            f"Function {bindings[extra].function_name} is bound to undeclared operation {extra}; ignoring",
            extra={"operation": extra},
        )

    missing = sorted(declared - set(bindings))
    if missing:
        raise BindingError(f"No function for {', '.join(missing)}", operation=missing[0])

    routes: List[RouteEntry] = []

    for static in definition.static_routes:
        routes.append(
            RouteEntry(
                path=static.binding.path,
                method=static.binding.method,
                mock=_mock_response(static.integration),
            )
        )

    for name, operation in definition.operations.items():
        binding = bindings[name]
        routes.append(
            RouteEntry(
                path=operation.binding.path,
                method=operation.binding.method,
                operation=name,
                function=binding.function_name,
                uri=binding.uri,
            )
        )

    routes.sort(key=lambda r: (r.path, r.method))
    return RoutingTable(title=definition.title, version=definition.version, routes=tuple(routes))


def _mock_response(integration: Mapping[str, Any]) -> MockResponse:
    default = (integration.get("responses") or {}).get("default") or {}

    headers = {}
    for key, value in sorted((default.get("responseParameters") or {}).items()):
        if key.startswith(_HEADER_PREFIX):
            headers[key[len(_HEADER_PREFIX) :]] = str(value).strip("'")

    body = (default.get("responseTemplates") or {}).get("application/json", "")

    return MockResponse(
        status_code=int(default.get("statusCode", 200)),
        headers=headers,
        body=body,
    )
