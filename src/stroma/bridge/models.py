"""
Bridge data models.

Descriptors and results exchanged with a tool-calling client. Field names are
snake_case in Python; to_wire() renders the camelCase shape tool protocols
expect.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class HintFormat(str, Enum):
    """How a blocked tool call is explained to the caller"""
    BRIEF = "brief"
    VERBOSE = "verbose"
    CONTEXTUAL = "contextual"


class ToolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(alias="inputSchema")
    transition_id: Optional[str] = Field(default=None, exclude=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    is_error: bool = Field(default=False, alias="isError")

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            wire["isError"] = True
        return wire
