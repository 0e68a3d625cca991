"""Tool bridge: a colored net's transitions as ranked, callable tools."""

from .formatting import (
    format_brief_error,
    format_contextual_error,
    format_semantic_hints,
    format_tool_result,
    format_verbose_error,
    to_tool_name,
)
from .models import HintFormat, ToolDescriptor, ToolResult
from .server import NEXT_ACTIONS_TOOL, ToolBridge, input_schema

__all__ = [
    "HintFormat",
    "ToolDescriptor",
    "ToolResult",
    "ToolBridge",
    "NEXT_ACTIONS_TOOL",
    "input_schema",
    "to_tool_name",
    "format_semantic_hints",
    "format_tool_result",
    "format_brief_error",
    "format_verbose_error",
    "format_contextual_error",
]
