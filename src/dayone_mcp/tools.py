"""Static MCP tool registry for the Day One gateway.

Each tool maps 1:1 to a bridge ``Action``. Schemas are declared here as data
and converted to ``mcp.types.Tool`` once; nothing is derived at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp.types import Tool

from dayone_mcp.models import Action


@dataclass(frozen=True)
class ParameterDef:
    """Definition for a JSON Schema parameter."""

    type: str  # "string", "number", "boolean"
    description: str
    default: Any = None
    minimum: int | None = None


@dataclass(frozen=True)
class ToolDef:
    """Definition for an MCP tool bound to a bridge action."""

    name: str
    action: Action
    description: str
    parameters: tuple[tuple[str, ParameterDef], ...]  # Ordered (name, param) pairs
    required: tuple[str, ...] = ()


# =============================================================================
# Reusable parameter definitions
# =============================================================================

TEXT_PARAM = ParameterDef(type="string", description="Entry content in markdown format")
JOURNAL_ID_PARAM = ParameterDef(type="string", description="Target journal ID (optional)")
JOURNAL_NAME_PARAM = ParameterDef(type="string", description="Target journal name (optional)")
STARRED_PARAM = ParameterDef(type="boolean", description="Star this entry")
ALL_DAY_PARAM = ParameterDef(type="boolean", description="Mark as all-day entry")


# =============================================================================
# Tool definitions
# =============================================================================

LIST_JOURNALS_TOOL = ToolDef(
    name="list_journals",
    action=Action.LIST_JOURNALS,
    description="Returns all journals with MCP access enabled",
    parameters=(),
)

CREATE_ENTRY_TOOL = ToolDef(
    name="create_entry",
    action=Action.CREATE_ENTRY,
    description="Creates a new journal entry with markdown content and optional metadata",
    parameters=(
        ("text", TEXT_PARAM),
        ("journal_id", JOURNAL_ID_PARAM),
        ("journal_name", JOURNAL_NAME_PARAM),
        (
            "date",
            ParameterDef(
                type="string",
                description="ISO8601 timestamp (e.g., 2025-08-20T15:30:00Z)",
            ),
        ),
        ("tags", ParameterDef(type="string", description="Comma-separated tag list")),
        ("attachments", ParameterDef(type="string", description="Comma-separated file paths")),
        ("starred", STARRED_PARAM),
        ("all_day", ALL_DAY_PARAM),
    ),
    required=("text",),
)

GET_ENTRIES_TOOL = ToolDef(
    name="get_entries",
    action=Action.GET_ENTRIES,
    description=(
        "Retrieves entries via full-text search, date filters, or journal constraints"
    ),
    parameters=(
        ("query", ParameterDef(type="string", description="Full-text search query")),
        (
            "journal_ids",
            ParameterDef(type="string", description="Comma-separated journal IDs to filter by"),
        ),
        (
            "journal_names",
            ParameterDef(type="string", description="Comma-separated journal names to filter by"),
        ),
        (
            "start_date",
            ParameterDef(type="string", description="Start date in YYYY-MM-DD format"),
        ),
        ("end_date", ParameterDef(type="string", description="End date in YYYY-MM-DD format")),
        (
            "on_this_day",
            ParameterDef(type="string", description="MM-DD format for anniversary queries"),
        ),
        (
            "limit",
            ParameterDef(
                type="number",
                description="Max results (default: 10, max: 50)",
                default=10,
                minimum=0,
            ),
        ),
        (
            "offset",
            ParameterDef(type="number", description="Pagination offset", default=0, minimum=0),
        ),
    ),
)

UPDATE_ENTRY_TOOL = ToolDef(
    name="update_entry",
    action=Action.UPDATE_ENTRY,
    description="Updates an existing entry's content or metadata",
    parameters=(
        ("entry_id", ParameterDef(type="string", description="Entry UUID")),
        ("journal_id", ParameterDef(type="string", description="Journal ID for disambiguation")),
        ("text", ParameterDef(type="string", description="New markdown content")),
        (
            "tags",
            ParameterDef(type="string", description="Comma-separated tags (replaces existing)"),
        ),
        ("attachments", ParameterDef(type="string", description="File paths to add")),
        ("starred", ParameterDef(type="boolean", description="Star flag")),
        ("all_day", ParameterDef(type="boolean", description="All-day flag")),
    ),
    required=("entry_id",),
)

TOOL_DEFS: tuple[ToolDef, ...] = (
    LIST_JOURNALS_TOOL,
    CREATE_ENTRY_TOOL,
    GET_ENTRIES_TOOL,
    UPDATE_ENTRY_TOOL,
)

TOOLS_BY_NAME: dict[str, ToolDef] = {tool.name: tool for tool in TOOL_DEFS}


# =============================================================================
# Schema generation
# =============================================================================


def _param_to_schema(param: ParameterDef) -> dict[str, Any]:
    """Convert a ParameterDef to a JSON Schema dict."""
    schema: dict[str, Any] = {"type": param.type}
    if param.description:
        schema["description"] = param.description
    if param.default is not None:
        schema["default"] = param.default
    if param.minimum is not None:
        schema["minimum"] = param.minimum
    return schema


def build_input_schema(tool: ToolDef) -> dict[str, Any]:
    """Convert a ToolDef to an MCP ``inputSchema`` dict."""
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {name: _param_to_schema(param) for name, param in tool.parameters},
    }
    if tool.required:
        schema["required"] = list(tool.required)
    return schema


def build_tools() -> list[Tool]:
    """Build MCP Tool objects for every registered tool, in registry order."""
    return [
        Tool(
            name=tool.name,
            description=tool.description,
            inputSchema=build_input_schema(tool),
        )
        for tool in TOOL_DEFS
    ]


def lookup_tool(name: str) -> ToolDef | None:
    return TOOLS_BY_NAME.get(name)


def missing_required(tool: ToolDef, arguments: dict[str, Any]) -> list[str]:
    """Names of required arguments that are absent or empty."""
    return [name for name in tool.required if arguments.get(name) in (None, "")]


__all__ = [
    "TOOL_DEFS",
    "ParameterDef",
    "ToolDef",
    "build_tools",
    "lookup_tool",
    "missing_required",
]
