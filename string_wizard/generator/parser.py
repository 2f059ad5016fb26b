"""
SAM Template Parser

Parse the SAM deployment template (YAML) and extract the deployed functions,
one per operation. Safely handle CloudFormation intrinsic functions (!Sub, !Ref, etc.).
"""

import re
from typing import Any

import yaml

DEFAULT_HANDLER = "lambda_function.lambda_handler"
DEFAULT_TIMEOUT = 30
DEFAULT_MEMORY = 128

_FUNCTION_SUFFIX = "Function"
_PARAM_RE = re.compile(r"\$\{([\w:]+)\}")


class CfnLoader(yaml.SafeLoader):
    """YAML loader that handles CloudFormation intrinsic functions."""

    pass


def cfn_constructor(loader: yaml.Loader, node: yaml.Node) -> Any:
    """Constructor for CloudFormation tags."""
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    elif isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node)
    return ""


def ref_constructor(loader: yaml.Loader, node: yaml.Node) -> Any:
    """!Ref Param -> {"Ref": "Param"} so it can be resolved against parameters."""
    return {"Ref": loader.construct_scalar(node)}


# Register CloudFormation tags.
for tag in ["!Sub", "!GetAtt", "!ImportValue", "!If", "!Join", "!Select", "!Split"]:
    yaml.add_constructor(tag, cfn_constructor, Loader=CfnLoader)
yaml.add_constructor("!Ref", ref_constructor, Loader=CfnLoader)


def parse_sam_template(content: str, parameters: dict | None = None) -> dict:
    """
    Parse a SAM template string and return the deployed functions.

    Args:
        content: SAM template YAML string
        parameters: dict for parameter substitution (optional)

    Returns:
        {
            'functions': [
                {
                    'logical_id': 'EchoFunction',
                    'name': 'EchoFunction',
                    'operation': 'Echo',
                    'code_uri': 'string_wizard/functions/echo/',
                    'handler': 'lambda_function.lambda_handler',
                    'entry_point': 'string_wizard.functions.echo.lambda_function.lambda_handler',
                }
            ]
        }
    """
    if parameters is None:
        parameters = {}

    data = yaml.load(content, Loader=CfnLoader) or {}

    # Template parameter defaults, overridden by the caller's values.
    resolved_params = {
        name: str(definition.get("Default"))
        for name, definition in (data.get("Parameters") or {}).items()
        if isinstance(definition, dict) and definition.get("Default") is not None
    }
    resolved_params.update({k: str(v) for k, v in parameters.items()})

    # Get default values from Globals.
    globals_config = (data.get("Globals") or {}).get("Function") or {}
    default_handler = globals_config.get("Handler", DEFAULT_HANDLER)
    default_timeout = globals_config.get("Timeout", DEFAULT_TIMEOUT)
    default_memory = globals_config.get("MemorySize", DEFAULT_MEMORY)

    functions = []
    resources = data.get("Resources") or {}

    for logical_id, resource in resources.items():
        # Only target AWS::Serverless::Function.
        if resource.get("Type", "") != "AWS::Serverless::Function":
            continue

        props = resource.get("Properties") or {}
        metadata = resource.get("Metadata") or {}

        function_name = _resolve_intrinsic(props.get("FunctionName", logical_id), resolved_params)

        code_uri = _resolve_intrinsic(props.get("CodeUri", "./"), resolved_params)
        if not code_uri.endswith("/"):
            code_uri += "/"

        handler = props.get("Handler", default_handler)

        operation = metadata.get("Operation") or _operation_from_logical_id(logical_id)

        functions.append(
            {
                "logical_id": logical_id,
                "name": function_name,
                "operation": _resolve_intrinsic(operation, resolved_params),
                "code_uri": code_uri,
                "handler": handler,
                "entry_point": entry_point(code_uri, handler),
                "timeout": props.get("Timeout", default_timeout),
                "memory_size": props.get("MemorySize", default_memory),
            }
        )

    return {"functions": functions, "parameters": resolved_params}


def entry_point(code_uri: str, handler: str) -> str:
    """
    Importable entry point of a function.

    "string_wizard/functions/echo/" + "lambda_function.lambda_handler"
        -> "string_wizard.functions.echo.lambda_function.lambda_handler"
    """
    package = code_uri.strip("./").replace("/", ".").strip(".")
    return f"{package}.{handler}" if package else handler


def _operation_from_logical_id(logical_id: str) -> str:
    if logical_id.endswith(_FUNCTION_SUFFIX) and logical_id != _FUNCTION_SUFFIX:
        return logical_id[: -len(_FUNCTION_SUFFIX)]
    return logical_id


def _resolve_intrinsic(value: Any, parameters: dict) -> str:
    """
    Resolve a CloudFormation intrinsic function.

    Simple implementation: supports !Ref Param and !Sub ${Param} format.
    """
    if isinstance(value, dict) and "Ref" in value:
        name = value["Ref"]
        return parameters.get(name, f"${{{name}}}")

    if not isinstance(value, str):
        return str(value) if value is not None else ""

    def replace_param(match):
        param_name = match.group(1)
        return parameters.get(param_name, f"${{{param_name}}}")

    return _PARAM_RE.sub(replace_param, value)
