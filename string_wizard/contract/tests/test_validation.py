import pytest

from string_wizard.contract import (
    InputValidationError,
    OutputValidationError,
    TypedError,
    UndeclaredErrorType,
    UnknownOperationError,
    ValidationLayer,
    load_interface_definition,
)


@pytest.fixture(scope="module")
def layer():
    return ValidationLayer(load_interface_definition())


class TestValidateInput:
    def test_valid_echo_input(self, layer):
        validated = layer.validate_input("Echo", {"string": "hello"})
        assert validated.string == "hello"

    def test_unknown_members_are_ignored(self, layer):
        validated = layer.validate_input("Echo", {"string": "hello", "extra": 1})
        assert validated.string == "hello"
        assert not hasattr(validated, "extra")

    def test_missing_required_member(self, layer):
        with pytest.raises(InputValidationError) as exc_info:
            layer.validate_input("Echo", {})
        assert exc_info.value.direction == "request"
        assert exc_info.value.issues[0].path == "/string"

    def test_wrong_type_is_not_coerced(self, layer):
        with pytest.raises(InputValidationError):
            layer.validate_input("Echo", {"string": 12321})

    def test_max_length(self, layer):
        layer.validate_input("Echo", {"string": "x" * 1024})
        with pytest.raises(InputValidationError):
            layer.validate_input("Echo", {"string": "x" * 1025})

    def test_control_characters_rejected(self, layer):
        with pytest.raises(InputValidationError):
            layer.validate_input("Echo", {"string": "line\nbreak"})

    def test_non_object_input(self, layer):
        with pytest.raises(InputValidationError, match="JSON object"):
            layer.validate_input("Echo", ["string"])

    def test_length_path_parameter(self, layer):
        assert layer.validate_input("Length", {"string": "abc"}).string == "abc"

    @pytest.mark.parametrize("value", ["a\tb", "a\x01b", "a\x7fb"])
    def test_length_control_characters_rejected(self, layer, value):
        with pytest.raises(InputValidationError) as exc_info:
            layer.validate_input("Length", {"string": value})
        assert exc_info.value.issues[0].path == "/string"

    def test_unknown_operation(self, layer):
        with pytest.raises(UnknownOperationError):
            layer.validate_input("Reverse", {"string": "abc"})

    def test_error_message_counts_issues(self, layer):
        with pytest.raises(InputValidationError) as exc_info:
            layer.validate_input("Echo", {})
        assert exc_info.value.message.startswith("1 validation error detected.")


class TestValidateOutput:
    def test_valid_output(self, layer):
        assert layer.validate_output("Length", {"length": 3}) == {"length": 3}

    def test_negative_length_rejected(self, layer):
        with pytest.raises(OutputValidationError) as exc_info:
            layer.validate_output("Length", {"length": -1})
        assert exc_info.value.direction == "response"

    def test_missing_output_member(self, layer):
        with pytest.raises(OutputValidationError):
            layer.validate_output("Echo", {})

    def test_non_mapping_output(self, layer):
        with pytest.raises(OutputValidationError):
            layer.validate_output("Echo", "abc")


class TestValidateError:
    def test_declared_error(self, layer):
        payload = layer.validate_error(
            "Echo", TypedError.of("PalindromeException", message="Cannot handle palindrome")
        )
        assert payload == {"message": "Cannot handle palindrome"}

    def test_undeclared_error(self, layer):
        with pytest.raises(UndeclaredErrorType):
            layer.validate_error("Length", TypedError.of("PalindromeException", message="x"))

    def test_error_payload_shape(self, layer):
        with pytest.raises(OutputValidationError):
            layer.validate_error("Echo", TypedError.of("PalindromeException"))


def test_layer_is_stateless(layer):
    """The same instance validates interleaved requests independently."""
    first = layer.validate_input("Echo", {"string": "one"})
    second = layer.validate_input("Length", {"string": "two"})
    assert first.string == "one"
    assert second.string == "two"
