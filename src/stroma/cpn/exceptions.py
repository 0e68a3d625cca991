#!/usr/bin/env python3
"""
Colored net exceptions.

All engine exceptions inherit from NetError for easy catching.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .core.specs import SemanticHint
    from .hints import ContextualHint


class BlockReason(Enum):
    """Why a transition could not fire"""
    MISSING_TOKENS = "missing_tokens"
    GUARD_FAILED = "guard_failed"


class NetError(Exception):
    """Base exception for all colored net errors."""


class ConstructionError(NetError):
    """Malformed net structure: duplicate ids, dangling or same-kind arc endpoints."""


class UnknownEntityError(NetError):
    """A place or transition id does not exist in the net."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} {entity_id!r} not found")
        self.kind = kind
        self.entity_id = entity_id


class NotEnabledError(NetError):
    """
    A transition was asked to fire but has no satisfying binding, or its guard
    rejected every candidate.

    Always carries the ranked hints that *are* available so callers can
    recover. HintingNet additionally attaches a ContextualHint.
    """

    def __init__(
        self,
        message: str,
        transition_id: str,
        transition_name: str,
        reason: BlockReason,
        available: List["SemanticHint"],
    ):
        super().__init__(message)
        self.transition_id = transition_id
        self.transition_name = transition_name
        self.reason = reason
        self.available = available
        self.hint: Optional["ContextualHint"] = None


class HandlerError(NetError):
    """The transition handler failed; the marking is unchanged."""

    def __init__(self, message: str, transition_id: str):
        super().__init__(message)
        self.transition_id = transition_id


class HandlerTimeoutError(HandlerError):
    """The handler did not finish within the caller-supplied timeout."""


class NestedFiringError(NetError):
    """A handler tried to fire a transition on the net that is running it."""

    def __init__(self, message: str, transition_id: str):
        super().__init__(message)
        self.transition_id = transition_id
