"""
Trust policy rendering.

Emits who may invoke the gateway (resource policy) and the per-function permissions
letting the gateway invoke each handler. Enforcement belongs to the platform.
"""

from typing import Any, Dict, Mapping, Optional

from .binder import HandlerBinding

POLICY_VERSION = "2012-10-17"
GATEWAY_PRINCIPAL = "apigateway.amazonaws.com"

DEFAULT_TRUST_POLICY: Dict[str, Any] = {
    "effect": "Allow",
    "principals": ["*"],
    "actions": ["execute-api:Invoke"],
    "resources": ["execute-api:/*/*/*"],
}


def build_trust_policy(
    bindings: Mapping[str, HandlerBinding],
    parameters: Mapping[str, str],
    trust_config: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the policy document written next to the routing table.

    trust_config overrides DEFAULT_TRUST_POLICY key by key (open invocation by default).
    """
    trust = dict(DEFAULT_TRUST_POLICY)
    trust.update(trust_config or {})

    principals = list(trust["principals"])
    principal: Any = "*" if principals == ["*"] else {"AWS": principals}

    partition = parameters.get("AWS::Partition", "aws")
    region = parameters.get("AWS::Region", "us-east-1")
    account_id = parameters.get("AWS::AccountId", "123456789012")
    api_id = parameters.get("ApiId", "*")
    source_arn = f"arn:{partition}:execute-api:{region}:{account_id}:{api_id}/*/*/*"

    return {
        "resourcePolicy": {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": trust["effect"],
                    "Principal": principal,
                    "Action": list(trust["actions"]),
                    "Resource": list(trust["resources"]),
                }
            ],
        },
        "invokePermissions": [
            {
                "StatementId": f"{name}Permission",
                "FunctionName": bindings[name].function_arn,
                "Action": "lambda:InvokeFunction",
                "Principal": GATEWAY_PRINCIPAL,
                "SourceArn": source_arn,
            }
            for name in sorted(bindings)
        ],
    }
