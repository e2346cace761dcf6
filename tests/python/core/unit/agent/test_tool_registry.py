"""Tests for ToolRegistry."""

import pytest

from taskflow_core.agent.parser import ToolCall
from taskflow_core.agent.registry import (
    MissingArgumentError,
    ToolError,
    ToolRegistry,
    UnknownToolError,
)


def _noop(invocation):
    return "ok"


class TestRegister:
    """Tests for registering tools."""

    def test_register_and_get(self):
        registry = ToolRegistry()

        spec = registry.register("read_file", _noop, required_args=["path"], path_args=["path"])

        assert registry.get("read_file") is spec
        assert spec.required_args == ("path",)
        assert spec.path_args == ("path",)
        assert spec.destructive is False

    def test_decorator_returns_handler(self):
        registry = ToolRegistry()

        @registry.tool("delete_file", path_args=["path"], destructive=True)
        def delete_file(invocation):
            return "deleted"

        assert delete_file(None) == "deleted"
        assert registry.get("delete_file").destructive is True

    def test_duplicate_registration_raises(self):
        registry = ToolRegistry()
        registry.register("read_file", _noop)

        with pytest.raises(ValueError):
            registry.register("read_file", _noop)

    def test_names_are_case_insensitive(self):
        registry = ToolRegistry()
        registry.register("Read_File", _noop)

        assert "read_file" in registry
        assert "READ_FILE" in registry
        assert registry.names() == ["read_file"]

    def test_names_sorted_and_len(self, file_registry):
        assert file_registry.names() == ["delete_file", "read_file", "write_file"]
        assert len(file_registry) == 3

    def test_contains_non_string(self, file_registry):
        assert 42 not in file_registry


class TestValidate:
    """Tests for validating parsed calls at the executor boundary."""

    def test_known_tool_with_arguments(self, file_registry):
        call = ToolCall(name="write_file", arguments={"path": "a", "content": "x"})

        assert file_registry.validate(call).name == "write_file"

    def test_unknown_tool(self, file_registry):
        call = ToolCall(name="format_disk", arguments={})

        with pytest.raises(UnknownToolError) as exc_info:
            file_registry.validate(call)

        assert exc_info.value.name == "format_disk"
        assert "format_disk" in str(exc_info.value)

    def test_missing_arguments_are_named(self, file_registry):
        call = ToolCall(name="write_file", arguments={})

        with pytest.raises(MissingArgumentError) as exc_info:
            file_registry.validate(call)

        assert exc_info.value.missing == ["path", "content"]
        assert "path, content" in str(exc_info.value)

    def test_errors_share_base_class(self, file_registry):
        with pytest.raises(ToolError):
            file_registry.validate(ToolCall(name="nope"))
