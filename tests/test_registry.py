"""Tests for the tool registry and tool catalogue."""
import pytest

from huly_client.schemas import ToolParams
from huly_mcp.tools import (
    CATEGORY_NAMES,
    TOOL_REGISTRY,
    TOOLS_BY_CATEGORY,
    build_registry,
    create_filtered_registry,
    define_tool,
    derive_annotations,
    parse_toolsets,
)


class EchoParams(ToolParams):
    value: str


async def echo(client, params):
    return {"echo": params.value}


class TestBuildRegistry:
    """Test registry construction."""

    def test_all_tool_names_are_unique(self):
        """Test that the full catalogue has no duplicate names."""
        names = [tool.name for tools in TOOLS_BY_CATEGORY.values() for tool in tools]
        assert len(names) == len(set(names))
        assert len(TOOL_REGISTRY) == len(names)

    def test_duplicate_name_fails_at_build_time(self):
        """Test that registering the same name twice raises."""
        first = define_tool("echo", "Echo", EchoParams, echo, "test")
        second = define_tool("echo", "Echo again", EchoParams, echo, "other")

        with pytest.raises(ValueError) as exc_info:
            build_registry([first], [second])

        assert "echo" in str(exc_info.value)

    def test_list_preserves_category_order(self):
        """Test that list() returns tools in catalogue order."""
        tool_a = define_tool("list_a", "A", EchoParams, echo, "one")
        tool_b = define_tool("get_b", "B", EchoParams, echo, "two")
        tool_c = define_tool("create_c", "C", EchoParams, echo, "two")

        registry = build_registry([tool_a], [tool_b, tool_c])

        assert [d.name for d in registry.list()] == ["list_a", "get_b", "create_c"]
        assert [d.name for d in registry.list()] == [d.name for d in registry.list()]

    def test_get_unknown_returns_none(self):
        """Test that lookups of unknown names return None."""
        assert TOOL_REGISTRY.get("no_such_tool") is None

    def test_get_known_tool(self):
        """Test that lookups by exact name return the registered tool."""
        tool = TOOL_REGISTRY.get("list_issues")
        assert tool is not None
        assert tool.definition.category == "issues"

    def test_input_schemas_are_objects(self):
        """Test that every advertised input schema is a JSON object schema."""
        for definition in TOOL_REGISTRY.list():
            assert definition.input_schema["type"] == "object", definition.name
            assert definition.description

    def test_required_fields_advertised(self):
        """Test that required parameters appear in the input schema."""
        schema = TOOL_REGISTRY.get("create_issue").definition.input_schema
        assert set(schema["required"]) == {"project", "title"}

    def test_mcp_tool_conversion(self):
        """Test conversion to the protocol Tool type."""
        tool = TOOL_REGISTRY.get("get_issue").definition.to_mcp_tool()
        assert tool.name == "get_issue"
        assert tool.inputSchema["type"] == "object"
        assert tool.annotations.readOnlyHint is True


class TestAnnotations:
    """Test annotation derivation from tool names."""

    def test_read_tools(self):
        """Test that read prefixes are read-only."""
        for name in ("list_issues", "get_issue", "fulltext_search"):
            annotations = derive_annotations(name)
            assert annotations.readOnlyHint is True
            assert annotations.destructiveHint is False

    def test_delete_tools_are_destructive(self):
        """Test that delete tools are destructive."""
        annotations = derive_annotations("delete_issue")
        assert annotations.readOnlyHint is False
        assert annotations.destructiveHint is True

    def test_create_tools_not_idempotent(self):
        """Test that create tools are not idempotent."""
        annotations = derive_annotations("create_issue")
        assert annotations.idempotentHint is False
        assert annotations.destructiveHint is False

    def test_update_tools_idempotent(self):
        """Test that update-like tools are idempotent."""
        for name in ("update_issue", "set_issue_milestone", "mark_notification_read", "remove_issue_label"):
            assert derive_annotations(name).idempotentHint is True

    def test_open_world(self):
        """Test that every tool talks to an external system."""
        assert derive_annotations("list_projects").openWorldHint is True

    def test_title_from_name(self):
        """Test that every tool advertises a readable title."""
        assert derive_annotations("list_issues").title == "List Issues"
        assert derive_annotations("get_unread_notification_count").title == "Get Unread Notification Count"
        for definition in TOOL_REGISTRY.list():
            assert definition.annotations.title


class TestToolsets:
    """Test TOOLSETS parsing and filtering."""

    def test_unset_means_all(self):
        """Test that an empty value selects all categories."""
        assert parse_toolsets(None) is None
        assert parse_toolsets("  ") is None

    def test_parse_normalizes(self):
        """Test trimming, lower-casing and de-duplication."""
        assert parse_toolsets(" Issues, projects ,issues") == ["issues", "projects"]

    def test_unknown_categories_ignored(self, caplog):
        """Test that unknown categories are dropped with a warning."""
        assert parse_toolsets("issues,bogus") == ["issues"]
        assert "bogus" in caplog.text

    def test_only_unknown_means_all(self):
        """Test that a value with no valid categories falls back to all."""
        assert parse_toolsets("bogus") is None

    def test_filtered_registry(self):
        """Test that filtering keeps only the selected categories."""
        registry = create_filtered_registry(["projects"])
        assert registry.names() == ["list_projects", "get_project"]

    def test_unfiltered_registry(self):
        """Test that no filter yields the whole catalogue."""
        registry = create_filtered_registry(None)
        assert len(registry) == len(TOOL_REGISTRY)
        assert set(CATEGORY_NAMES) == {d.category for d in registry.list()}

    def test_template_and_attachment_toolsets(self):
        """Test that issue templates and attachments can be selected on their own."""
        registry = create_filtered_registry(parse_toolsets("Issue-Templates,attachments"))

        assert "create_issue_from_template" in registry
        assert "add_issue_attachment" in registry
        assert "create_issue" not in registry
        assert {d.category for d in registry.list()} == {"issue-templates", "attachments"}
