"""
Text rendering for tool results, next-action lists and blocked calls.

All functions are pure: they take engine values and return the text a
tool-calling client shows to its model.
"""

import json
from typing import Any, Optional, Sequence

from ..cpn.core.specs import SemanticHint
from ..cpn.exceptions import BlockReason, NotEnabledError
from ..cpn.hints import PATH_ARROW, ContextualHint

NEXT_ACTIONS_SHOWN = 3


def to_tool_name(transition_name: str) -> str:
    """verb:noun:verb -> verb_noun_verb"""
    return transition_name.replace(":", "_")


def _percent(confidence: float) -> str:
    return f"{confidence * 100:.0f}%"


def format_semantic_hints(hints: Sequence[SemanticHint]) -> str:
    if not hints:
        return "No actions are currently available. You may need to start with an initial action."

    lines = ["Based on the current workflow state, here are the recommended next actions:", ""]
    for index, hint in enumerate(hints, start=1):
        tool_name = to_tool_name(hint.transition_name)
        lines.append(f"{index}. **{tool_name}** ({hint.transition_name})")
        lines.append(f"   Description: {hint.description or hint.transition_name}")
        lines.append(f"   Confidence: {_percent(hint.confidence)}")
        if hint.example:
            lines.append(f"   Example: `{hint.example}`")
        lines.append("")
    return "\n".join(lines)


def format_tool_result(tool_name: str, result: Any, next_hints: Sequence[SemanticHint]) -> str:
    output = f"Successfully executed: {tool_name}\n\n"
    if result:
        output += "Result:\n```json\n"
        output += json.dumps(result, indent=2, default=str)
        output += "\n```\n\n"

    if next_hints:
        output += "Suggested next actions:\n"
        for hint in next_hints[:NEXT_ACTIONS_SHOWN]:
            output += f"- {to_tool_name(hint.transition_name)}: {hint.description or hint.transition_name}\n"
    return output


def format_brief_error(tool_name: str, error: NotEnabledError) -> str:
    output = f"{tool_name}: Missing prerequisites\n"
    if error.reason is BlockReason.GUARD_FAILED:
        output = f"{tool_name}: Preconditions rejected the current state\n"

    if error.available:
        output += "Available: " + ", ".join(
            f"{to_tool_name(hint.transition_name)} ({_percent(hint.confidence)})"
            for hint in error.available
        )
    else:
        output += "No actions available"
    return output


def format_verbose_error(tool_name: str, error: NotEnabledError) -> str:
    output = f"Cannot execute {tool_name} at this time.\n\n"
    if error.reason is BlockReason.GUARD_FAILED:
        output += "**Why?** Its inputs are present but its precondition rejects them.\n\n"
    else:
        output += "**Why?** This action requires certain preconditions that aren't met.\n\n"

    if not error.available:
        output += ("**No actions are currently available.** "
                   "You may need to start with an initial action or reset the workflow.")
        return output

    output += "**Available actions you can take:**\n\n"
    for index, hint in enumerate(error.available, start=1):
        output += f"{index}. **{to_tool_name(hint.transition_name)}**\n"
        output += f"   {hint.description or hint.transition_name}\n"
        output += f"   Confidence: {_percent(hint.confidence)}\n\n"
    output += (f"**Hint:** The workflow requires you to complete certain steps "
               f"before {tool_name} becomes available.")
    return output


def format_contextual_error(tool_name: str, error: NotEnabledError,
                            hint: Optional[ContextualHint] = None) -> str:
    """
    "<tool> needs: <requirements>" followed by the suggested tool sequence.

    Falls back to the first available action when no sequence is known.
    """
    hint = hint or error.hint
    if hint is None or not hint.missing_requirements:
        if error.reason is BlockReason.GUARD_FAILED:
            output = f"{tool_name} is blocked: its precondition rejects the current state\n"
        else:
            output = f"{tool_name} needs: prerequisites\n"
    else:
        output = f"{tool_name} needs: {', '.join(hint.missing_requirements)}\n"
        if hint.path_found and hint.suggested_path:
            steps = [to_tool_name(name) for name in hint.suggested_path] + [tool_name]
            return output + f"Try instead: {PATH_ARROW.join(steps)}"
        if not hint.path_found:
            output += "No known sequence of tools produces them\n"

    if error.available:
        output += f"Try: {to_tool_name(error.available[0].transition_name)} first"
    return output.rstrip("\n")
