import copy
import json
import logging

import pytest

from string_wizard.contract import load_interface_definition
from string_wizard.generator.binder import (
    BindingError,
    bind_interface_definition,
    build_routing_table,
    collect_handler_bindings,
    function_arn,
    invocation_uri,
)

PARAMETERS = {"AWS::Partition": "aws", "AWS::Region": "eu-west-1", "AWS::AccountId": "111122223333"}


def _function(name, operation):
    return {"name": name, "operation": operation}


@pytest.fixture(scope="module")
def definition():
    return load_interface_definition()


@pytest.fixture
def bindings():
    return collect_handler_bindings(
        [_function("wizard-echo", "Echo"), _function("wizard-length", "Length")], PARAMETERS
    )


class TestAddresses:
    def test_function_arn(self):
        assert (
            function_arn("fn", "aws", "eu-west-1", "111122223333")
            == "arn:aws:lambda:eu-west-1:111122223333:function:fn"
        )

    def test_invocation_uri(self):
        arn = "arn:aws:lambda:eu-west-1:111122223333:function:fn"
        assert invocation_uri(arn, "aws", "eu-west-1") == (
            "arn:aws:apigateway:eu-west-1:lambda:path/2015-03-31/functions/"
            "arn:aws:lambda:eu-west-1:111122223333:function:fn/invocations"
        )


class TestCollectHandlerBindings:
    def test_keyed_by_operation(self, bindings):
        assert set(bindings) == {"Echo", "Length"}
        assert bindings["Echo"].function_name == "wizard-echo"
        assert bindings["Echo"].function_arn.endswith(":function:wizard-echo")

    def test_duplicate_operation(self):
        with pytest.raises(BindingError) as exc_info:
            collect_handler_bindings([_function("a", "Echo"), _function("b", "Echo")], PARAMETERS)
        assert exc_info.value.operation == "Echo"

    def test_default_account_parameters(self):
        binding = collect_handler_bindings([_function("fn", "Echo")], {})["Echo"]
        assert binding.function_arn == "arn:aws:lambda:us-east-1:123456789012:function:fn"


class TestBuildRoutingTable:
    def test_routes(self, definition, bindings):
        table = build_routing_table(definition, bindings)
        keys = [(r.path, r.method) for r in table.routes]
        assert keys == [("/echo", "OPTIONS"), ("/echo", "POST"), ("/length/{string}", "GET")]

        echo = table.routes[1]
        assert echo.operation == "Echo"
        assert echo.function == "wizard-echo"
        assert echo.uri == bindings["Echo"].uri

    def test_mock_entry_is_static(self, definition, bindings):
        options = build_routing_table(definition, bindings).routes[0]
        assert options.is_static
        assert options.function is None
        assert options.mock.status_code == 200
        assert options.mock.headers["Access-Control-Allow-Origin"] == "*"
        assert options.mock.headers["Access-Control-Allow-Methods"] == "POST"

    def test_missing_handler_fails(self, definition):
        only_echo = collect_handler_bindings([_function("wizard-echo", "Echo")], PARAMETERS)
        with pytest.raises(BindingError) as exc_info:
            build_routing_table(definition, only_echo)
        assert exc_info.value.operation == "Length"

    def test_extra_handler_is_ignored(self, definition, bindings, caplog):
        extra = dict(bindings)
        extra.update(collect_handler_bindings([_function("wizard-reverse", "Reverse")], PARAMETERS))
        with caplog.at_level(logging.WARNING):
            table = build_routing_table(definition, extra)
        assert "Reverse" in caplog.text
        assert table == build_routing_table(definition, bindings)

    def test_deterministic(self, definition, bindings):
        reversed_bindings = dict(reversed(list(bindings.items())))
        assert build_routing_table(definition, bindings) == build_routing_table(
            definition, reversed_bindings
        )

    def test_addresses(self, definition, bindings):
        table = build_routing_table(definition, bindings)
        assert table.addresses() == {name: b.uri for name, b in bindings.items()}


class TestBindInterfaceDefinition:
    def test_sets_integration_uri(self, definition, bindings):
        addresses = {name: b.uri for name, b in bindings.items()}
        bound = bind_interface_definition(definition.document, addresses)
        integration = bound["paths"]["/echo"]["post"]["x-amazon-apigateway-integration"]
        assert integration["uri"] == bindings["Echo"].uri
        assert integration["type"] == "aws_proxy"

    def test_mock_entry_untouched(self, definition, bindings):
        addresses = {name: b.uri for name, b in bindings.items()}
        bound = bind_interface_definition(definition.document, addresses)
        assert (
            bound["paths"]["/echo"]["options"]["x-amazon-apigateway-integration"]
            == definition.document["paths"]["/echo"]["options"]["x-amazon-apigateway-integration"]
        )

    def test_input_not_mutated(self, definition, bindings):
        document = copy.deepcopy(definition.document)
        snapshot = json.dumps(document, sort_keys=True)
        bind_interface_definition(document, {name: b.uri for name, b in bindings.items()})
        assert json.dumps(document, sort_keys=True) == snapshot

    def test_missing_address_fails(self, definition):
        with pytest.raises(BindingError) as exc_info:
            bind_interface_definition(definition.document, {"Echo": "arn:echo"})
        assert exc_info.value.operation == "Length"

    def test_adds_missing_integration(self):
        document = {"paths": {"/ping": {"get": {"operationId": "Ping"}}}}
        bound = bind_interface_definition(document, {"Ping": "arn:ping"})
        assert bound["paths"]["/ping"]["get"]["x-amazon-apigateway-integration"] == {
            "type": "aws_proxy",
            "httpMethod": "POST",
            "uri": "arn:ping",
        }
