#!/usr/bin/env python3
"""
Colored Net - Decorator Layer

NetDecorator wraps a reference to another net (a ColoredNet or another
decorator) and forwards the whole public contract to it. Subclasses override
the operations they enrich, typically fire_transition, without touching the
wrapped object.
"""

from typing import Any, Dict, List, Optional, Tuple

from .specs import Arc, Binding, NetState, Place, SemanticHint, Token, Transition


class NetDecorator:
    """Forwarding base for composed net decorators"""

    def __init__(self, base: Any):
        self.base = base

    # Structure
    def add_place(self, place: Place) -> None:
        self.base.add_place(place)

    def add_transition(self, transition: Transition) -> None:
        self.base.add_transition(transition)

    def add_arc(self, arc: Arc) -> None:
        self.base.add_arc(arc)

    # Marking
    def add_token(self, place_id: str, color: Any = None) -> str:
        return self.base.add_token(place_id, color)

    def tokens(self, place_id: str) -> Tuple[Token, ...]:
        return self.base.tokens(place_id)

    def marking(self) -> Dict[str, int]:
        return self.base.marking()

    # Introspection
    def get_place(self, place_id: str) -> Place:
        return self.base.get_place(place_id)

    def get_transition(self, transition_id: str) -> Transition:
        return self.base.get_transition(transition_id)

    def input_arcs(self, transition_id: str) -> Tuple[Arc, ...]:
        return self.base.input_arcs(transition_id)

    def output_arcs(self, transition_id: str) -> Tuple[Arc, ...]:
        return self.base.output_arcs(transition_id)

    def count_matching(self, arc: Arc) -> int:
        return self.base.count_matching(arc)

    def get_state(self) -> NetState:
        return self.base.get_state()

    # Queries
    def find_bindings(self, transition_id: str, limit: Optional[int] = None) -> List[Binding]:
        return self.base.find_bindings(transition_id, limit)

    def enabled_bindings(self, transition_id: str) -> List[Binding]:
        return self.base.enabled_bindings(transition_id)

    def is_enabled(self, transition_id: str) -> bool:
        return self.base.is_enabled(transition_id)

    def get_enabled_transitions(self) -> List[SemanticHint]:
        return self.base.get_enabled_transitions()

    # Execution
    async def fire_transition(self, transition_id: str, binding: Optional[Binding] = None,
                              *, timeout: Optional[float] = None) -> Any:
        return await self.base.fire_transition(transition_id, binding, timeout=timeout)
