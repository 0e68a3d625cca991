#!/usr/bin/env python3
"""
Colored Net - Specification Layer

Declarative data structures for places, transitions, arcs and tokens, plus the
read-only projections (hints and snapshots) handed out to collaborators.
Runtime token storage lives in runtime.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

Binding = Dict[str, Any]

GuardFunc = Callable[[Binding], bool]
HandlerFunc = Callable[[Binding], Union[Awaitable[Any], Any]]
PatternFunc = Callable[["Token"], bool]
ExpressionFunc = Callable[[Any], Any]


@dataclass(frozen=True)
class Token:
    """A unit of data occupying exactly one place"""
    id: str
    color: Any
    place: str


@dataclass(frozen=True)
class Place:
    """A named holder of tokens representing one state/context"""
    id: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Transition:
    """
    A named operation over places.

    name is structured as ``verb``, ``verb:noun`` or ``verb:noun:verb``; the
    segment count feeds the confidence heuristic.
    """
    id: str
    name: str
    description: Optional[str] = None
    guard: Optional[GuardFunc] = None
    handler: Optional[HandlerFunc] = None

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.name.split(':'))


@dataclass(frozen=True)
class Arc:
    """Directed connection between a place and a transition"""
    id: str
    source: str  # Place or Transition id
    target: str  # Place or Transition id
    weight: int = 1
    pattern: Optional[PatternFunc] = None  # input arcs only
    expression: Optional[ExpressionFunc] = None  # output arcs only


@dataclass(frozen=True)
class SemanticHint:
    """Ranked description of one evaluable transition-and-binding pair"""
    transition_id: str
    transition_name: str
    confidence: float
    required_tokens: Tuple[str, ...] = ()
    description: Optional[str] = None
    example: Optional[str] = None
    binding: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class PlaceView:
    """Snapshot of a place and the tokens it held at snapshot time"""
    id: str
    name: str
    description: Optional[str]
    tokens: Tuple[Token, ...]


@dataclass(frozen=True)
class NetState:
    """Read-only snapshot returned by ColoredNet.get_state()"""
    places: Tuple[PlaceView, ...]
    transitions: Tuple[Transition, ...]
    arcs: Tuple[Arc, ...]

    def place(self, place_id: str) -> Optional[PlaceView]:
        for view in self.places:
            if view.id == place_id:
                return view
        return None

    def transition(self, transition_id: str) -> Optional[Transition]:
        for transition in self.transitions:
            if transition.id == transition_id:
                return transition
        return None
