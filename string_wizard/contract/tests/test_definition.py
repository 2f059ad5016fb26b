import json

import pytest

from string_wizard.contract import (
    DefinitionError,
    UnknownOperationError,
    load_interface_definition,
    parse_interface_definition,
)
from string_wizard.contract.definition import DEFAULT_DEFINITION_PATH, is_static_entry, iter_entries


@pytest.fixture
def definition():
    return load_interface_definition()


class TestPackagedDefinition:
    def test_declares_echo_and_length(self, definition):
        assert definition.title == "StringWizard"
        assert definition.operation_names == ("Echo", "Length")

    def test_echo_binding_and_shapes(self, definition):
        echo = definition.operation("Echo")
        assert echo.binding.method == "POST"
        assert echo.binding.path == "/echo"
        assert echo.input_schema["required"] == ["string"]
        assert echo.input_schema["properties"]["string"]["maxLength"] == 1024
        assert echo.output_schema["required"] == ["string"]

    def test_echo_declares_palindrome_exception(self, definition):
        error = definition.operation("Echo").error("PalindromeException")
        assert error is not None
        assert error.status_code == 400
        assert error.payload_schema["required"] == ["message"]

    def test_length_takes_path_parameter(self, definition):
        length = definition.operation("Length")
        assert length.binding.method == "GET"
        assert length.binding.path == "/length/{string}"
        assert length.path_parameters == ("string",)
        assert length.input_schema["required"] == ["string"]
        assert length.errors == ()

    def test_options_entry_is_static(self, definition):
        assert len(definition.static_routes) == 1
        static = definition.static_routes[0]
        assert static.binding.method == "OPTIONS"
        assert static.binding.path == "/echo"
        assert static.integration["type"] == "mock"

    def test_unknown_operation(self, definition):
        with pytest.raises(UnknownOperationError):
            definition.operation("Reverse")

    def test_default_is_cached(self):
        assert load_interface_definition() is load_interface_definition()


def _doc(paths, schemas=None):
    return {
        "openapi": "3.0.2",
        "info": {"title": "T", "version": "1"},
        "paths": paths,
        "components": {"schemas": schemas or {}},
    }


class TestParseErrors:
    def test_no_paths(self):
        with pytest.raises(DefinitionError):
            parse_interface_definition({"info": {}})

    def test_missing_operation_id(self):
        with pytest.raises(DefinitionError, match="no operationId"):
            parse_interface_definition(_doc({"/a": {"get": {"responses": {}}}}))

    def test_duplicate_operation_id(self):
        paths = {
            "/a": {"get": {"operationId": "Op", "responses": {}}},
            "/b": {"get": {"operationId": "Op", "responses": {}}},
        }
        with pytest.raises(DefinitionError, match="Duplicate"):
            parse_interface_definition(_doc(paths))

    def test_unresolvable_reference(self):
        paths = {
            "/a": {
                "post": {
                    "operationId": "Op",
                    "requestBody": {
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Nope"}}}
                    },
                    "responses": {},
                }
            }
        }
        with pytest.raises(DefinitionError, match="Unresolvable"):
            parse_interface_definition(_doc(paths))

    def test_anonymous_error_schema(self):
        paths = {
            "/a": {
                "get": {
                    "operationId": "Op",
                    "responses": {
                        "400": {"content": {"application/json": {"schema": {"type": "object"}}}}
                    },
                }
            }
        }
        with pytest.raises(DefinitionError, match="named schema"):
            parse_interface_definition(_doc(paths))


def test_parse_does_not_mutate_input():
    with open(DEFAULT_DEFINITION_PATH, encoding="utf-8") as f:
        document = json.load(f)
    snapshot = json.dumps(document, sort_keys=True)
    parse_interface_definition(document)
    assert json.dumps(document, sort_keys=True) == snapshot


def test_load_yaml_definition(tmp_path):
    path = tmp_path / "service.yaml"
    path.write_text(
        """
openapi: 3.0.2
info: {title: Mini, version: "1"}
paths:
  /ping:
    get:
      operationId: Ping
      responses:
        "200":
          description: ok
"""
    )
    definition = load_interface_definition(path)
    assert definition.operation_names == ("Ping",)


def test_load_missing_file(tmp_path):
    with pytest.raises(DefinitionError, match="not found"):
        load_interface_definition(tmp_path / "missing.json")


def test_iter_entries_and_static_detection(definition):
    entries = {(path, method): op for path, method, op in iter_entries(definition.document)}
    assert set(entries) == {("/echo", "OPTIONS"), ("/echo", "POST"), ("/length/{string}", "GET")}
    assert is_static_entry(entries[("/echo", "OPTIONS")])
    assert not is_static_entry(entries[("/echo", "POST")])
