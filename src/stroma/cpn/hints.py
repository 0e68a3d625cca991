#!/usr/bin/env python3
"""
Contextual hints for blocked transitions.

Explains why a transition cannot fire (which input places lack tokens) and
suggests the shortest sequence of transitions whose firing would supply them.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from .core.decorator import NetDecorator
from .core.specs import Binding, Transition
from .exceptions import NotEnabledError

logger = logging.getLogger(__name__)

PATH_ARROW = " → "
DEFAULT_MAX_STATES = 10_000


@dataclass(frozen=True)
class ContextualHint:
    """
    Diagnosis for one transition.

    Attributes:
        missing_requirements: Human-readable text per missing input place
        suggested_path: Transition names to fire, in order
        readable: Pre-rendered single message
        path_found: False when requirements are missing and no producing
            sequence exists
        missing_places: Place ids behind missing_requirements
    """
    missing_requirements: Tuple[str, ...]
    suggested_path: Tuple[str, ...]
    readable: str
    path_found: bool = True
    missing_places: Tuple[str, ...] = field(default=())


def describe_place(net: Any, place_id: str, descriptions: Optional[Mapping[str, str]] = None) -> str:
    """Domain text for a place, falling back to its display name, then its id"""
    if descriptions and place_id in descriptions:
        return descriptions[place_id]
    place = net.get_place(place_id)
    return place.name or place.id


def _unsatisfied_inputs(net: Any, transition_id: str) -> List[str]:
    """
    Input places that cannot currently supply what the transition needs.

    A place is missing when one of its arcs has fewer matching tokens than the
    arc weight, or when the arcs reading it together need more tokens than it
    holds.
    """
    missing: List[str] = []
    demand: Dict[str, int] = {}
    for arc in net.input_arcs(transition_id):
        demand[arc.source] = demand.get(arc.source, 0) + arc.weight
        if net.count_matching(arc) < arc.weight and arc.source not in missing:
            missing.append(arc.source)

    for place_id, needed in demand.items():
        if place_id not in missing and len(net.tokens(place_id)) < needed:
            missing.append(place_id)
    return missing


def find_enabling_path(net: Any, target_places: List[str],
                       max_states: int = DEFAULT_MAX_STATES) -> Optional[List[str]]:
    """
    Shortest ordered transition-name sequence that would populate target_places.

    Breadth-first backward search. Each state is the set of places still
    required plus the transitions chosen so far (earliest first). Expanding a
    required place tries every transition with an output arc into it; that
    transition's inputs the current marking cannot satisfy become required.
    The visited set over (place, required set) pairs bounds the search on
    cyclic nets.

    Returns:
        List of transition names ([] when nothing is required), or None when no
        sequence exists within max_states expansions.
    """
    required: FrozenSet[str] = frozenset(target_places)
    if not required:
        return []

    state = net.get_state()
    place_order = {view.id: i for i, view in enumerate(state.places)}
    producers: Dict[str, List[Transition]] = {}
    outputs: Dict[str, Set[str]] = {}
    for arc in state.arcs:
        if arc.target in place_order:
            transition = state.transition(arc.source)
            producers.setdefault(arc.target, []).append(transition)
            outputs.setdefault(transition.id, set()).add(arc.target)

    unsatisfied: Dict[str, Optional[FrozenSet[str]]] = {}

    def needs_of(transition: Transition) -> Optional[FrozenSet[str]]:
        """Inputs still to be produced, or None when the producer cannot fire now"""
        if transition.id not in unsatisfied:
            needs = frozenset(_unsatisfied_inputs(net, transition.id))
            # inputs all present, so only a guard or binding conflict can block it
            if not needs and not net.is_enabled(transition.id):
                needs = None
            unsatisfied[transition.id] = needs
        return unsatisfied[transition.id]

    queue: Deque[Tuple[FrozenSet[str], Tuple[Transition, ...]]] = deque([(required, ())])
    visited: Set[Tuple[str, FrozenSet[str]]] = set()
    expanded = 0

    while queue:
        outstanding, path = queue.popleft()
        if not outstanding:
            names: List[str] = []
            for transition in path:
                if transition.name not in names:
                    names.append(transition.name)
            return names

        place_id = min(outstanding, key=lambda p: place_order.get(p, len(place_order)))
        key = (place_id, outstanding)
        if key in visited:
            continue
        visited.add(key)

        expanded += 1
        if expanded > max_states:
            logger.warning("[hints] path search gave up after %d states", max_states)
            return None

        for transition in producers.get(place_id, []):
            needs = needs_of(transition)
            if needs is None:
                continue
            remaining = outstanding - outputs[transition.id]
            queue.append((remaining | needs, (transition,) + path))

    return None


def generate_contextual_hint(net: Any, transition_id: str,
                             descriptions: Optional[Mapping[str, str]] = None,
                             max_states: int = DEFAULT_MAX_STATES) -> ContextualHint:
    """
    Explain why a transition is blocked and how to unblock it.

    Raises:
        UnknownEntityError: no such transition
    """
    transition = net.get_transition(transition_id)
    missing = _unsatisfied_inputs(net, transition_id)
    requirements = tuple(describe_place(net, place_id, descriptions) for place_id in missing)

    if not missing:
        if net.is_enabled(transition_id):
            readable = f"{transition.name} is ready to execute"
        elif transition.guard is not None and net.find_bindings(transition_id, limit=1):
            readable = f"{transition.name} is blocked: its guard rejects every current binding"
        else:
            readable = f"{transition.name} has no consistent binding for its inputs"
        return ContextualHint(requirements, (), readable, True, ())

    path = find_enabling_path(net, missing, max_states=max_states)
    needs = ", ".join(requirements)
    if path is None:
        readable = f"{transition.name} needs: {needs}\nNo known sequence of transitions produces them"
        return ContextualHint(requirements, (), readable, False, tuple(missing))

    readable = f"{transition.name} needs: {needs}\nTry instead: {PATH_ARROW.join(path)}"
    return ContextualHint(requirements, tuple(path), readable, True, tuple(missing))


class HintingNet(NetDecorator):
    """
    Net decorator that enriches NotEnabledError with a ContextualHint.

    The error keeps its type, reason and available hints; its message becomes
    the readable hint line and error.hint carries the structured diagnosis.

        net = HintingNet(create_file_operations_net(), REQUIREMENT_DESCRIPTIONS)
        try:
            await net.fire_transition("write_file")
        except NotEnabledError as e:
            print(e.hint.suggested_path)
    """

    def __init__(self, base: Any, descriptions: Optional[Mapping[str, str]] = None):
        super().__init__(base)
        self.descriptions: Dict[str, str] = dict(descriptions or {})

    def contextual_hint(self, transition_id: str) -> ContextualHint:
        return generate_contextual_hint(self.base, transition_id, self.descriptions)

    async def fire_transition(self, transition_id: str, binding: Optional[Binding] = None,
                              *, timeout: Optional[float] = None) -> Any:
        try:
            return await self.base.fire_transition(transition_id, binding, timeout=timeout)
        except NotEnabledError as e:
            e.hint = self.contextual_hint(transition_id)
            e.args = (e.hint.readable,)
            raise
