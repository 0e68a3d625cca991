#!/usr/bin/env python3
"""
Spores Core API

WorkflowLogger records tool calls into sessions and summarises the paths
sessions take through a net. Records are appended as JSONL:

    <log_path>/tool_calls.jsonl       one ToolCallEvent per firing attempt
    <log_path>/workflow_paths.jsonl   one WorkflowPath per closed session

Write failures are logged and swallowed; recording never affects the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..common.timebase import Timebase, WallClock
from .config import LoggerConfig, get_config
from .encoder import Encoder, JSONEncoder
from .models import (
    ErrorType, PathFrequency, PathPatterns, SessionInfo, SessionStats,
    ToolCallEvent, WorkflowPath, analyze_workflow_path, generate_session_id,
)
from .transport import AsyncFileTransport, AsyncTransport, read_jsonl

logger = logging.getLogger(__name__)

TOOL_CALLS = "tool_calls"
WORKFLOW_PATHS = "workflow_paths"
PATH_SEPARATOR = " → "
TOP_PATHS = 10
CLEANUP_INTERVAL_SECONDS = 60.0


class WorkflowLogger:
    """
    Session-aware analytics logger.

    Calls arriving within the configured timeout of the previous one join the
    live session; otherwise a new session starts. Expired sessions have their
    WorkflowPath written when expire_sessions() runs, either directly or from
    the background task started by start().

    Usage:
        ```python
        workflow_logger = WorkflowLogger(LoggerConfig(log_path=tmp_dir))
        workflow_logger.start()
        net = RecordingNet(create_file_operations_net(), workflow_logger)
        ...
        await workflow_logger.shutdown()
        ```
    """

    def __init__(self, config: Optional[LoggerConfig] = None,
                 encoder: Optional[Encoder] = None,
                 timebase: Optional[Timebase] = None):
        self.config = config or get_config()
        self.encoder = encoder or JSONEncoder()
        self.timebase = timebase or WallClock()
        self.sessions: Dict[str, SessionInfo] = {}
        self._transports: Dict[str, AsyncTransport] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def stream_path(self, stream: str) -> Path:
        return self.config.log_path / f"{stream}.jsonl"

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def _is_live(self, session: SessionInfo, now: float) -> bool:
        return now - session.last_activity < self.config.session_timeout_seconds

    def get_or_create_session(self, context_hint: Optional[str] = None) -> SessionInfo:
        """Join the live session or start a new one"""
        now = self.timebase.now()
        for session in self.sessions.values():
            if self._is_live(session, now):
                session.last_activity = now
                return session

        session = SessionInfo(
            session_id=generate_session_id(now),
            start_time=now,
            last_activity=now,
            user_context=context_hint,
        )
        self.sessions[session.session_id] = session
        logger.info("Started workflow session %s", session.session_id)
        return session

    async def expire_sessions(self) -> List[str]:
        """
        Close sessions idle for longer than the timeout.

        Each closed session gets its WorkflowPath written first.

        Returns:
            Ids of the sessions that were closed
        """
        now = self.timebase.now()
        expired = [sid for sid, s in self.sessions.items() if not self._is_live(s, now)]
        for session_id in expired:
            await self.log_workflow_path(session_id)
            del self.sessions[session_id]
            logger.info("Closed workflow session %s", session_id)
        return expired

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def log_tool_call(
        self,
        tool_name: str,
        transition_id: str,
        confidence: float,
        success: bool,
        execution_time_ms: float,
        error_type: Optional[ErrorType] = None,
        error_message: Optional[str] = None,
        input_tokens: Optional[List[str]] = None,
        output_tokens: Optional[List[str]] = None,
        next_enabled_transitions: Optional[List[str]] = None,
        context_data: Optional[Dict[str, Any]] = None,
    ) -> Optional[ToolCallEvent]:
        """
        Record one firing attempt in the current session.

        Returns:
            The recorded event, or None when logging is disabled
        """
        if not self.enabled:
            return None

        session = self.get_or_create_session()
        session.tool_call_count += 1

        event = ToolCallEvent(
            timestamp=self.timebase.now_ms(),
            session_id=session.session_id,
            tool_name=tool_name,
            transition_id=transition_id,
            confidence=confidence,
            success=success,
            execution_time_ms=execution_time_ms,
            error_type=error_type,
            error_message=error_message,
            input_tokens=list(input_tokens or []),
            output_tokens=list(output_tokens or []),
            next_enabled_transitions=list(next_enabled_transitions or []),
            context_data=context_data,
        )
        await self._send(TOOL_CALLS, event)
        logger.debug("Logged %s (success=%s, session=%s)", tool_name, success, session.session_id)
        return event

    async def log_workflow_path(self, session_id: str) -> Optional[WorkflowPath]:
        """
        Summarise and record the path a session walked.

        Returns:
            The recorded path, or None when disabled or the session has no calls
        """
        if not self.enabled:
            return None

        tool_calls = await self.get_session_tool_calls(session_id)
        if not tool_calls:
            return None

        path = analyze_workflow_path(tool_calls)
        await self._send(WORKFLOW_PATHS, path)
        return path

    async def _send(self, stream: str, record: Any) -> None:
        try:
            transport = self._transports.get(stream)
            if transport is None:
                transport = self._transports[stream] = AsyncFileTransport(self.stream_path(stream))
            data = self.encoder.encode(record)
            await transport.send(data, self.encoder.content_type())
        except Exception as e:
            logger.error(f"Failed to write {stream} record: {e}")

    # ------------------------------------------------------------------
    # Reading back
    # ------------------------------------------------------------------

    async def _read(self, stream: str) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(read_jsonl, self.stream_path(stream))
        except OSError as e:
            logger.error(f"Failed to read {stream} records: {e}")
            return []

    async def get_tool_calls(self) -> List[ToolCallEvent]:
        """Every recorded call, oldest first"""
        calls: List[ToolCallEvent] = []
        for record in await self._read(TOOL_CALLS):
            try:
                calls.append(ToolCallEvent.from_dict(record))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable tool call record: {e}")
        calls.sort(key=lambda call: call.timestamp)
        return calls

    async def get_session_tool_calls(self, session_id: str) -> List[ToolCallEvent]:
        return [call for call in await self.get_tool_calls() if call.session_id == session_id]

    async def get_workflow_paths(self) -> List[WorkflowPath]:
        paths: List[WorkflowPath] = []
        for record in await self._read(WORKFLOW_PATHS):
            try:
                paths.append(WorkflowPath.from_dict(record))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable workflow path record: {e}")
        return paths

    def get_session_stats(self) -> SessionStats:
        total = sum(s.tool_call_count for s in self.sessions.values())
        count = len(self.sessions)
        return SessionStats(
            active_sessions=count,
            total_tool_calls=total,
            avg_session_length=total / count if count else 0.0,
        )

    async def analyze_path_patterns(self) -> PathPatterns:
        """Most frequent tool sequences plus average confidence and efficiency"""
        paths = await self.get_workflow_paths()
        if not paths:
            return PathPatterns(common_paths=[], average_confidence=0.0, path_efficiency=0.0)

        counts = Counter(PATH_SEPARATOR.join(p.sequence) for p in paths)
        common = [
            PathFrequency(sequence=key.split(PATH_SEPARATOR) if key else [], frequency=n)
            for key, n in counts.most_common(TOP_PATHS)
        ]
        return PathPatterns(
            common_paths=common,
            average_confidence=sum(p.avg_confidence for p in paths) / len(paths),
            path_efficiency=sum(p.path_efficiency for p in paths) / len(paths),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, interval: float = CLEANUP_INTERVAL_SECONDS) -> None:
        """Start the background task that closes idle sessions"""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop(interval))

    async def _cleanup_loop(self, interval: float) -> None:
        while True:
            await self.timebase.sleep(interval)
            try:
                await self.expire_sessions()
            except Exception as e:
                logger.error(f"Session cleanup failed: {e}")

    async def shutdown(self) -> None:
        """Stop cleanup, write paths for every open session, close files"""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        for session_id in list(self.sessions):
            await self.log_workflow_path(session_id)
        self.sessions.clear()

        for transport in self._transports.values():
            await transport.close()
        self._transports.clear()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
