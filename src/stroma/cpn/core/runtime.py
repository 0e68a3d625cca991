#!/usr/bin/env python3
"""
Colored Net - Runtime Layer

Owns the marking (tokens per place), searches for bindings, ranks enabled
transitions and fires them under a transactional, single-flight protocol.
"""

import asyncio
import copy
import inspect
import logging
from collections import Counter
from contextvars import ContextVar
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..exceptions import (
    BlockReason,
    ConstructionError,
    HandlerError,
    HandlerTimeoutError,
    NestedFiringError,
    NotEnabledError,
    UnknownEntityError,
)
from .specs import Arc, Binding, NetState, Place, PlaceView, SemanticHint, Token, Transition

logger = logging.getLogger(__name__)
# Library does not configure handlers by default. Callers may configure logging.
logger.addHandler(logging.NullHandler())

BASE_CONFIDENCE = 0.5
VARIABLE_BONUS = 0.1
COMPOSITE_BONUS = 0.2

# ids of the nets whose firing lock the current task (or its children) holds
_firing_nets: ContextVar[frozenset] = ContextVar("stroma_firing_nets", default=frozenset())


class _Slot(NamedTuple):
    """One token position required by an input arc"""
    arc: Arc
    variable: str


# A complete assignment pairs every slot with the token chosen for it
Assignment = Tuple[Tuple[_Slot, Token], ...]


def calculate_confidence(transition: Transition, binding: Binding) -> float:
    """
    Cheap ranking heuristic, not correctness-bearing.

    0.5 base, +0.1 per bound variable, +0.2 for composite verb:noun:verb
    names, clamped to [0, 1].
    """
    confidence = BASE_CONFIDENCE + VARIABLE_BONUS * len(binding)
    if len(transition.segments) == 3:
        confidence += COMPOSITE_BONUS
    return round(min(max(confidence, 0.0), 1.0), 6)


def generate_example(transition: Transition) -> str:
    """Example invocation string for a structured transition name"""
    parts = transition.segments
    if len(parts) == 2:
        return f'{parts[0]}("{parts[1]}")'
    if len(parts) == 3:
        return f'{parts[0]}("{parts[1]}", "{parts[2]}")'
    return transition.name


def assignment_binding(assignment: Assignment) -> Binding:
    return {slot.variable: token.color for slot, token in assignment}


def detached(token: Token) -> Token:
    """Copy of a token whose color shares nothing with the marking"""
    return replace(token, color=copy.deepcopy(token.color))


class PlaceRuntime:
    """Runtime token storage for a place; tokens kept in insertion (FIFO) order"""

    def __init__(self, spec: Place):
        self.spec = spec
        self.tokens: List[Token] = []

    def add_token(self, token: Token):
        self.tokens.append(token)

    def remove_tokens(self, tokens_to_remove: Iterable[Token]):
        """Remove specific token instances, matched by id"""
        doomed = {token.id for token in tokens_to_remove}
        self.tokens = [token for token in self.tokens if token.id not in doomed]

    def count_matching(self, arc: Arc) -> int:
        if arc.pattern is None:
            return len(self.tokens)
        return sum(1 for token in self.tokens if arc.pattern(token))

    def view(self) -> PlaceView:
        return PlaceView(
            id=self.spec.id,
            name=self.spec.name,
            description=self.spec.description,
            tokens=tuple(detached(token) for token in self.tokens),
        )


class ColoredNet:
    """
    A colored Petri net and its current marking.

    Construction (add_place / add_transition / add_arc) may be interleaved with
    firings. Queries are synchronous and never suspend, so they always observe
    a committed marking; firings hold an exclusive lock from binding selection
    through commit.
    """

    def __init__(self):
        self._places: Dict[str, PlaceRuntime] = {}
        self._transitions: Dict[str, Transition] = {}
        self._arcs: Dict[str, Arc] = {}
        self._input_arcs: Dict[str, List[Arc]] = {}
        self._output_arcs: Dict[str, List[Arc]] = {}
        self._token_counter = 0
        self._fire_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def add_place(self, place: Place) -> None:
        self._check_new_node_id(place.id)
        self._places[place.id] = PlaceRuntime(place)

    def add_transition(self, transition: Transition) -> None:
        self._check_new_node_id(transition.id)
        self._transitions[transition.id] = transition
        self._input_arcs[transition.id] = []
        self._output_arcs[transition.id] = []

    def add_arc(self, arc: Arc) -> None:
        if arc.id in self._arcs:
            raise ConstructionError(f"Arc {arc.id!r} already exists")
        if not isinstance(arc.weight, int) or arc.weight < 1:
            raise ConstructionError(f"Arc {arc.id!r} weight must be an integer >= 1, got {arc.weight!r}")

        for endpoint in (arc.source, arc.target):
            if endpoint not in self._places and endpoint not in self._transitions:
                raise ConstructionError(f"Arc {arc.id!r} references unknown node {endpoint!r}")

        if arc.source in self._places and arc.target in self._transitions:
            self._input_arcs[arc.target].append(arc)
        elif arc.source in self._transitions and arc.target in self._places:
            self._output_arcs[arc.source].append(arc)
        else:
            raise ConstructionError(
                f"Arc {arc.id!r} must connect a place and a transition "
                f"({arc.source!r} -> {arc.target!r})"
            )
        self._arcs[arc.id] = arc

    def _check_new_node_id(self, node_id: str):
        if node_id in self._places or node_id in self._transitions:
            raise ConstructionError(f"Node id {node_id!r} already exists")

    # ------------------------------------------------------------------
    # Marking
    # ------------------------------------------------------------------

    def add_token(self, place_id: str, color: Any = None) -> str:
        """Seed a token into a place and return its id"""
        place = self._get_place_runtime(place_id)
        token = self._mint(place_id, copy.deepcopy(color))
        place.add_token(token)
        logger.debug("[seed] %s -> %s", token.id, place_id)
        return token.id

    def _mint(self, place_id: str, color: Any) -> Token:
        self._token_counter += 1
        return Token(id=f"token-{self._token_counter}", color=color, place=place_id)

    def tokens(self, place_id: str) -> Tuple[Token, ...]:
        return tuple(detached(token) for token in self._get_place_runtime(place_id).tokens)

    def marking(self) -> Dict[str, int]:
        """Token count per place"""
        return {place_id: len(place.tokens) for place_id, place in self._places.items()}

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_place(self, place_id: str) -> Place:
        return self._get_place_runtime(place_id).spec

    def get_transition(self, transition_id: str) -> Transition:
        try:
            return self._transitions[transition_id]
        except KeyError:
            raise UnknownEntityError("Transition", transition_id) from None

    def input_arcs(self, transition_id: str) -> Tuple[Arc, ...]:
        self.get_transition(transition_id)
        return tuple(self._input_arcs[transition_id])

    def output_arcs(self, transition_id: str) -> Tuple[Arc, ...]:
        self.get_transition(transition_id)
        return tuple(self._output_arcs[transition_id])

    def count_matching(self, arc: Arc) -> int:
        """Number of tokens in the arc's source place that satisfy its pattern"""
        return self._get_place_runtime(arc.source).count_matching(arc)

    def get_state(self) -> NetState:
        return NetState(
            places=tuple(place.view() for place in self._places.values()),
            transitions=tuple(self._transitions.values()),
            arcs=tuple(self._arcs.values()),
        )

    def _get_place_runtime(self, place_id: str) -> PlaceRuntime:
        try:
            return self._places[place_id]
        except KeyError:
            raise UnknownEntityError("Place", place_id) from None

    # ------------------------------------------------------------------
    # Binding search
    # ------------------------------------------------------------------

    def _input_slots(self, transition_id: str) -> List[_Slot]:
        """
        Expand input arcs into token slots.

        A place contributing a single token binds ``<place>_token``; a place
        contributing several (weight > 1 or several arcs) binds positional
        zero-based ``<place>_token_<n>`` entries.
        """
        arcs = self._input_arcs[transition_id]
        per_place = Counter()
        for arc in arcs:
            per_place[arc.source] += arc.weight

        seen = Counter()
        slots = []
        for arc in arcs:
            for _ in range(arc.weight):
                if per_place[arc.source] == 1:
                    variable = f"{arc.source}_token"
                else:
                    variable = f"{arc.source}_token_{seen[arc.source]}"
                seen[arc.source] += 1
                slots.append(_Slot(arc, variable))
        return slots

    def _search(self, transition_id: str, limit: Optional[int] = None) -> List[Assignment]:
        """
        Enumerate token assignments for a transition's input arcs.

        Iterative depth-first backtracking over slots. Tokens are scanned in
        FIFO order, a token claimed by an earlier slot in the branch is never
        reused, and consecutive slots of one arc pick increasing positions so
        weight-n arcs yield combinations rather than permutations.
        """
        slots = self._input_slots(transition_id)
        if not slots:
            return [()]

        results: List[Assignment] = []
        chosen: List[Token] = []
        claimed = set()
        cursors = [0] * len(slots)
        depth = 0

        while depth >= 0:
            slot = slots[depth]
            tokens = self._places[slot.arc.source].tokens
            position = cursors[depth]
            picked = None
            while position < len(tokens):
                candidate = tokens[position]
                position += 1
                if candidate.id in claimed:
                    continue
                if slot.arc.pattern is not None and not slot.arc.pattern(candidate):
                    continue
                picked = candidate
                break
            cursors[depth] = position

            if picked is None:
                # exhausted; backtrack
                depth -= 1
                if depth >= 0:
                    claimed.discard(chosen.pop().id)
                continue

            chosen.append(picked)
            claimed.add(picked.id)

            if depth + 1 == len(slots):
                results.append(tuple(zip(slots, chosen)))
                if limit is not None and len(results) >= limit:
                    return results
                claimed.discard(chosen.pop().id)
                continue

            depth += 1
            same_arc = slots[depth].arc is slots[depth - 1].arc
            cursors[depth] = cursors[depth - 1] if same_arc else 0

        return results

    def find_bindings(self, transition_id: str, limit: Optional[int] = None) -> List[Binding]:
        """All bindings satisfying the input arcs (guard not applied); colors are copies"""
        self.get_transition(transition_id)
        return [copy.deepcopy(assignment_binding(a)) for a in self._search(transition_id, limit)]

    def _passes_guard(self, transition: Transition, binding: Binding) -> bool:
        return transition.guard is None or bool(transition.guard(binding))

    def enabled_bindings(self, transition_id: str) -> List[Binding]:
        transition = self.get_transition(transition_id)
        return [b for b in self.find_bindings(transition_id) if self._passes_guard(transition, b)]

    def is_enabled(self, transition_id: str) -> bool:
        transition = self.get_transition(transition_id)
        if transition.guard is None:
            return bool(self._search(transition_id, limit=1))
        return bool(self.enabled_bindings(transition_id))

    def get_enabled_transitions(self) -> List[SemanticHint]:
        """One hint per (transition, guard-passing binding), best first"""
        hints = []
        for transition in self._transitions.values():
            for binding in self.enabled_bindings(transition.id):
                hints.append(SemanticHint(
                    transition_id=transition.id,
                    transition_name=transition.name,
                    description=transition.description,
                    confidence=calculate_confidence(transition, binding),
                    required_tokens=tuple(binding.keys()),
                    example=generate_example(transition),
                    binding=MappingProxyType(dict(binding)),
                ))
        # sorted() is stable: ties keep declaration order
        return sorted(hints, key=lambda hint: hint.confidence, reverse=True)

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    def _candidates(self, transition: Transition,
                    supplied: Optional[Binding]) -> List[Tuple[Assignment, Binding]]:
        assignments = self._search(transition.id)
        if supplied is None:
            return [(a, copy.deepcopy(assignment_binding(a))) for a in assignments]

        # A supplied binding is the sole candidate: layer it over the first
        # assignment whose bound colors agree with it.
        for assignment in assignments:
            bound = assignment_binding(assignment)
            if all(bound[key] == value for key, value in supplied.items() if key in bound):
                return [(assignment, {**copy.deepcopy(bound), **supplied})]
        return []

    def _not_enabled(self, transition: Transition, reason: BlockReason, message: str) -> NotEnabledError:
        return NotEnabledError(
            message,
            transition_id=transition.id,
            transition_name=transition.name,
            reason=reason,
            available=self.get_enabled_transitions(),
        )

    async def fire_transition(self, transition_id: str, binding: Optional[Binding] = None,
                              *, timeout: Optional[float] = None) -> Any:
        """
        Fire a transition and return its handler result.

        Input tokens are only consumed, and output tokens only produced, after
        the handler has succeeded. A failing, timed-out or cancelled handler
        leaves the marking untouched. The handler receives copies of the input
        colors.

        Firings are serialized per net, so a handler may not fire transitions
        on the net that is running it; such a call raises NestedFiringError
        instead of waiting on the lock forever.

        Raises:
            UnknownEntityError: no such transition
            NestedFiringError: called from inside a handler of this net
            NotEnabledError: no satisfying binding, or the guard rejected all
            HandlerError: the handler (or an output expression) failed
        """
        transition = self.get_transition(transition_id)
        if id(self) in _firing_nets.get():
            raise NestedFiringError(
                f"Cannot fire {transition_id} from inside a handler running on the same net",
                transition_id,
            )

        async with self._fire_lock:
            entered = _firing_nets.set(_firing_nets.get() | {id(self)})
            try:
                return await self._fire_locked(transition, binding, timeout)
            finally:
                _firing_nets.reset(entered)

    async def _fire_locked(self, transition: Transition, binding: Optional[Binding],
                           timeout: Optional[float]) -> Any:
        transition_id = transition.id
        candidates = self._candidates(transition, binding)
        if not candidates:
            raise self._not_enabled(
                transition, BlockReason.MISSING_TOKENS,
                f"Transition {transition_id} is not enabled",
            )

        selected = next(
            (c for c in candidates if self._passes_guard(transition, c[1])), None
        )
        if selected is None:
            raise self._not_enabled(
                transition, BlockReason.GUARD_FAILED,
                f"Guard condition failed for transition {transition_id}",
            )

        assignment, bound = selected
        staged: Dict[str, List[Token]] = {}
        for slot, token in assignment:
            staged.setdefault(slot.arc.source, []).append(token)
        logger.debug("[fire] %s staged=%s", transition_id,
                     {place: [t.id for t in toks] for place, toks in staged.items()})

        result = await self._invoke_handler(transition, bound, timeout)
        produced = self._stage_outputs(transition, result)

        # Commit: no suspension point from here to return
        for place_id, tokens in staged.items():
            self._places[place_id].remove_tokens(tokens)
        for place_id, color in produced:
            self._places[place_id].add_token(self._mint(place_id, color))

        logger.debug("[fire] %s committed consumed=%d produced=%d", transition_id,
                     len(assignment), len(produced))
        return result

    async def _invoke_handler(self, transition: Transition, binding: Binding,
                              timeout: Optional[float]) -> Any:
        if transition.handler is None:
            return binding

        try:
            outcome = transition.handler(dict(binding))
            if inspect.isawaitable(outcome):
                if timeout is None:
                    outcome = await outcome
                else:
                    outcome = await asyncio.wait_for(outcome, timeout)
            return outcome
        except asyncio.TimeoutError as e:
            logger.warning("[fire] %s handler timed out after %ss", transition.id, timeout)
            raise HandlerTimeoutError(
                f"Handler for {transition.id} timed out after {timeout}s", transition.id
            ) from e
        except asyncio.CancelledError:
            logger.info("[fire] %s cancelled; marking unchanged", transition.id)
            raise
        except Exception as e:
            logger.warning("[fire] %s handler failed: %s", transition.id, e)
            raise HandlerError(f"Handler for {transition.id} failed: {e}", transition.id) from e

    def _stage_outputs(self, transition: Transition, result: Any) -> List[Tuple[str, Any]]:
        """Compute output colors before anything is mutated"""
        produced = []
        try:
            for arc in self._output_arcs[transition.id]:
                for _ in range(arc.weight):
                    color = arc.expression(result) if arc.expression else result
                    produced.append((arc.target, copy.deepcopy(color)))
        except Exception as e:
            raise HandlerError(
                f"Output expression for {transition.id} failed: {e}", transition.id
            ) from e
        return produced
