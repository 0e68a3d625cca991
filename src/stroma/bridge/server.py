"""
Tool bridge.

Presents a colored net's transitions as callable tools. Tools are listed in
order of current confidence so enabled actions come first, a meta tool
returns the ranked next actions, and blocked calls come back as guidance
text rather than failures.

The bridge is protocol-neutral: descriptors and results are pydantic models
whose to_wire() output matches what tool-calling protocols expect. Wiring
them to a transport is left to the host application.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from ..cpn.exceptions import ConstructionError, HandlerError, NotEnabledError, UnknownEntityError
from ..cpn.hints import generate_contextual_hint
from .formatting import (
    format_brief_error,
    format_contextual_error,
    format_semantic_hints,
    format_tool_result,
    format_verbose_error,
    to_tool_name,
)
from .models import HintFormat, ToolDescriptor, ToolResult

logger = logging.getLogger(__name__)

NEXT_ACTIONS_TOOL = "get_next_actions"


def input_schema(transition_name: str) -> Dict[str, Any]:
    """
    Object schema derived from a structured transition name.

    verb:noun gets a string property named after the noun; verb:noun:verb adds
    an `action` enum holding the trailing verb. Every tool accepts an optional
    `context` object.
    """
    parts = transition_name.split(":")
    properties: Dict[str, Any] = {}

    if len(parts) >= 2:
        verb, noun = parts[0], parts[1]
        properties[noun] = {
            "type": "string",
            "description": f"The {noun} to {verb}",
        }
    if len(parts) == 3:
        properties["action"] = {
            "type": "string",
            "enum": [parts[2]],
            "description": f"Action to perform after {parts[0]}ing the {parts[1]}",
        }

    properties["context"] = {
        "type": "object",
        "description": "Optional context from previous operations",
        "properties": {},
    }
    return {"type": "object", "properties": properties}


class ToolBridge:
    """
    Exposes a net as a set of tools.

    Example:
        ```python
        bridge = ToolBridge(HintingNet(create_file_operations_net()), REQUIREMENT_DESCRIPTIONS)
        bridge.net.add_token("start", {})
        tools = bridge.list_tools()
        result = await bridge.call_tool("search_files", {"query": "*.ts"})
        ```

    Call arguments are passed to the net as the supplied binding, so they
    reach the transition handler alongside the bound token colors.
    """

    def __init__(self, net: Any, descriptions: Optional[Mapping[str, str]] = None,
                 hint_format: Union[HintFormat, str] = HintFormat.CONTEXTUAL):
        self.net = net
        self.descriptions: Dict[str, str] = dict(descriptions or {})
        self.hint_format = HintFormat(hint_format)

    def _tools(self) -> Dict[str, ToolDescriptor]:
        # Rebuilt per call; transitions may be added after construction
        tools: Dict[str, ToolDescriptor] = {}
        for transition in self.net.get_state().transitions:
            name = to_tool_name(transition.name)
            if name in tools:
                raise ConstructionError(
                    f"Transitions {tools[name].transition_id!r} and {transition.id!r} "
                    f"both map to tool name {name!r}"
                )
            tools[name] = ToolDescriptor(
                name=name,
                description=transition.description or f"Execute {transition.name}",
                input_schema=input_schema(transition.name),
                transition_id=transition.id,
            )

        tools[NEXT_ACTIONS_TOOL] = ToolDescriptor(
            name=NEXT_ACTIONS_TOOL,
            description="Get semantically appropriate next actions based on current workflow state",
            input_schema={"type": "object", "properties": {}},
        )
        return tools

    def list_tools(self) -> List[ToolDescriptor]:
        """All tools, highest current confidence first; disabled tools keep declaration order"""
        confidence: Dict[str, float] = {}
        for hint in self.net.get_enabled_transitions():
            confidence[hint.transition_id] = max(confidence.get(hint.transition_id, 0.0), hint.confidence)

        tools = list(self._tools().values())
        return sorted(tools, key=lambda tool: confidence.get(tool.transition_id, 0.0), reverse=True)

    def get_tool(self, name: str) -> ToolDescriptor:
        tool = self._tools().get(name)
        if tool is None:
            raise UnknownEntityError("tool", name)
        return tool

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """
        Execute a tool.

        Raises:
            UnknownEntityError: no tool with this name
        """
        tool = self.get_tool(name)
        if name == NEXT_ACTIONS_TOOL:
            return ToolResult(text=format_semantic_hints(self.net.get_enabled_transitions()))

        binding = dict(arguments) if arguments else None
        logger.info("Calling tool %s (transition %s)", name, tool.transition_id)
        try:
            result = await self.net.fire_transition(tool.transition_id, binding)
        except NotEnabledError as e:
            logger.info("Tool %s blocked: %s", name, e.reason.value)
            return ToolResult(text=self.format_blocked(name, e))
        except HandlerError as e:
            logger.warning("Tool %s failed: %s", name, e)
            return ToolResult(text=f"Error executing {name}: {e}", is_error=True)

        return ToolResult(text=format_tool_result(name, result, self.net.get_enabled_transitions()))

    def format_blocked(self, tool_name: str, error: NotEnabledError) -> str:
        if self.hint_format is HintFormat.BRIEF:
            return format_brief_error(tool_name, error)
        if self.hint_format is HintFormat.VERBOSE:
            return format_verbose_error(tool_name, error)

        hint = error.hint or generate_contextual_hint(self.net, error.transition_id, self.descriptions)
        return format_contextual_error(tool_name, error, hint)
