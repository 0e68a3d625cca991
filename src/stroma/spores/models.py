#!/usr/bin/env python3
"""
Spores Data Models

Records written by the workflow analytics logger: one ToolCallEvent per
firing attempt, and one WorkflowPath per analysed session.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorType(Enum):
    """Failure category of a firing attempt"""
    MISSING_TOKENS = "missing_tokens"
    GUARD_FAILED = "guard_failed"
    HANDLER_ERROR = "handler_error"
    OTHER = "other"


@dataclass
class SessionInfo:
    """
    A run of tool calls grouped by recent activity.

    Attributes:
        session_id: Unique session identifier
        start_time: Timebase seconds when the session opened
        last_activity: Timebase seconds of the latest tool call
        tool_call_count: Calls recorded in this session
        model: Optional model name reported by the caller
        user_context: Optional free-form context from the first call
    """
    session_id: str
    start_time: float
    last_activity: float
    tool_call_count: int = 0
    model: Optional[str] = None
    user_context: Optional[str] = None


@dataclass
class ToolCallEvent:
    """
    One firing attempt.

    Attributes:
        timestamp: Epoch milliseconds when the attempt was recorded
        session_id: Session the attempt was grouped into
        tool_name: Structured transition name (e.g. "search:file:read")
        transition_id: Transition that was asked to fire
        confidence: Best confidence the transition had when requested (0 if not enabled)
        success: Whether the firing completed
        execution_time_ms: Wall time spent in the firing
        error_type: Failure category when success is False
        error_message: Failure message when success is False
        input_tokens: Binding variables the attempt expected to consume
        output_tokens: Places that received tokens
        next_enabled_transitions: Names enabled after the attempt
        context_data: Caller-supplied extras
    """
    timestamp: int
    session_id: str
    tool_name: str
    transition_id: str
    confidence: float
    success: bool
    execution_time_ms: float
    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None
    input_tokens: List[str] = field(default_factory=list)
    output_tokens: List[str] = field(default_factory=list)
    next_enabled_transitions: List[str] = field(default_factory=list)
    context_data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolCallEvent":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if values.get('error_type') is not None:
            values['error_type'] = ErrorType(values['error_type'])
        return cls(**values)


@dataclass
class WorkflowPath:
    """
    Summary of the tool sequence a session walked.

    Attributes:
        path_efficiency: Ratio of successful to total calls
    """
    session_id: str
    sequence: List[str]
    confidence_scores: List[float]
    total_tools: int
    unique_tools: int
    avg_confidence: float
    path_efficiency: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowPath":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class SessionStats:
    active_sessions: int
    total_tool_calls: int
    avg_session_length: float


@dataclass
class PathFrequency:
    sequence: List[str]
    frequency: int


@dataclass
class PathPatterns:
    common_paths: List[PathFrequency]
    average_confidence: float
    path_efficiency: float


def generate_session_id(now: float) -> str:
    """
    Session id of the form YYYYMMDD-HHMMSS-<8 hex chars>.

    Args:
        now: Epoch seconds used for the readable prefix
    """
    stamp = datetime.fromtimestamp(now)
    suffix = hashlib.sha256(f"{now}-{random.random()}".encode()).hexdigest()[:8]
    return f"{stamp:%Y%m%d-%H%M%S}-{suffix}"


def analyze_workflow_path(tool_calls: List[ToolCallEvent]) -> WorkflowPath:
    """Summarise a session's tool calls, assumed sorted by timestamp"""
    sequence = [call.tool_name for call in tool_calls]
    confidence_scores = [call.confidence for call in tool_calls]
    successful = sum(1 for call in tool_calls if call.success)
    total = len(tool_calls)

    return WorkflowPath(
        session_id=tool_calls[0].session_id if tool_calls else '',
        sequence=sequence,
        confidence_scores=confidence_scores,
        total_tools=total,
        unique_tools=len(set(sequence)),
        avg_confidence=sum(confidence_scores) / total if total else 0.0,
        path_efficiency=successful / total if total else 0.0,
    )
