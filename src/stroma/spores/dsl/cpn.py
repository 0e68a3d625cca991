#!/usr/bin/env python3
"""
Spores Adapter for colored nets

RecordingNet composes over any net and records one ToolCallEvent per firing
attempt through a WorkflowLogger. Engine behavior and errors pass through
unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ...common.timebase import MonotonicClock, Timebase
from ...cpn.core.decorator import NetDecorator
from ...cpn.core.specs import Binding
from ...cpn.exceptions import HandlerError, NotEnabledError
from ..core import WorkflowLogger
from ..models import ErrorType

logger = logging.getLogger(__name__)


class RecordingNet(NetDecorator):
    """
    Net decorator that logs every fire_transition call.

    Usage:
        ```python
        workflow_logger = WorkflowLogger()
        net = RecordingNet(HintingNet(create_file_operations_net()), workflow_logger)
        await net.fire_transition("search_files", {"query": "*.ts"})
        ```

    Unknown transition ids are not recorded; they are caller bugs, not
    workflow steps. Cancellation is not recorded either.
    """

    def __init__(self, base: Any, workflow_logger: WorkflowLogger,
                 timebase: Optional[Timebase] = None,
                 context_data: Optional[Dict[str, Any]] = None):
        super().__init__(base)
        self.workflow_logger = workflow_logger
        self.timebase = timebase or MonotonicClock()
        self.context_data = context_data
        self._enabled = True

    def enable(self):
        """Enable recording."""
        self._enabled = True

    def disable(self):
        """Disable recording; firings still go through."""
        self._enabled = False

    async def fire_transition(self, transition_id: str, binding: Optional[Binding] = None,
                              *, timeout: Optional[float] = None) -> Any:
        if not self._enabled:
            return await self.base.fire_transition(transition_id, binding, timeout=timeout)

        transition = self.base.get_transition(transition_id)
        hints = [h for h in self.base.get_enabled_transitions() if h.transition_id == transition_id]
        confidence = max((h.confidence for h in hints), default=0.0)
        input_tokens = list(hints[0].required_tokens) if hints else []

        started = self.timebase.now()
        try:
            result = await self.base.fire_transition(transition_id, binding, timeout=timeout)
        except NotEnabledError as e:
            await self._record(transition.name, transition_id, confidence, started, input_tokens,
                               error_type=ErrorType(e.reason.value), error_message=str(e))
            raise
        except HandlerError as e:
            await self._record(transition.name, transition_id, confidence, started, input_tokens,
                               error_type=ErrorType.HANDLER_ERROR, error_message=str(e))
            raise
        except Exception as e:
            await self._record(transition.name, transition_id, confidence, started, input_tokens,
                               error_type=ErrorType.OTHER, error_message=str(e))
            raise

        await self._record(
            transition.name, transition_id, confidence, started, input_tokens,
            output_tokens=[arc.target for arc in self.base.output_arcs(transition_id)],
        )
        return result

    async def _record(self, tool_name: str, transition_id: str, confidence: float,
                      started: float, input_tokens: List[str],
                      error_type: Optional[ErrorType] = None,
                      error_message: Optional[str] = None,
                      output_tokens: Optional[List[str]] = None) -> None:
        elapsed_ms = (self.timebase.now() - started) * 1000
        try:
            next_enabled = [h.transition_name for h in self.base.get_enabled_transitions()]
        except Exception as e:
            logger.warning(f"Could not collect enabled transitions after {tool_name}: {e}")
            next_enabled = []

        await self.workflow_logger.log_tool_call(
            tool_name=tool_name,
            transition_id=transition_id,
            confidence=confidence,
            success=error_type is None,
            execution_time_ms=elapsed_ms,
            error_type=error_type,
            error_message=error_message,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            next_enabled_transitions=next_enabled,
            context_data=self.context_data,
        )
