#!/usr/bin/env python3
"""
Colored Net - Builder Layer

NetBuilder provides the API for declaratively describing a colored net.
Used directly or within @cpn.net decorated functions; build() produces a
fresh ColoredNet each time it is called.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from ..exceptions import ConstructionError
from .runtime import ColoredNet
from .specs import Arc, ExpressionFunc, GuardFunc, HandlerFunc, PatternFunc, Place, Transition


class PlaceRef:
    """Reference to a place for use in arc definitions"""
    def __init__(self, place_id: str):
        self.id = place_id

    def __repr__(self):
        return f"PlaceRef({self.id})"


class TransitionRef:
    """Reference to a transition for use in arc definitions"""
    def __init__(self, transition_id: str, name: str):
        self.id = transition_id
        self.name = name

    def __repr__(self):
        return f"TransitionRef({self.name})"


class ArcChain:
    """Fluent interface for chaining arc definitions"""

    def __init__(self, builder: "NetBuilder", last_ref: Any):
        self.builder = builder
        self.last_ref = last_ref

    def arc(self, target: Any, weight: int = 1, pattern: Optional[PatternFunc] = None,
            expression: Optional[ExpressionFunc] = None, id: Optional[str] = None) -> "ArcChain":
        """Chain another arc from the last element to target"""
        return self.builder.arc(self.last_ref, target, weight=weight, pattern=pattern,
                                expression=expression, id=id)


class NetBuilder:
    """Builder for constructing colored nets"""

    def __init__(self, name: str):
        self.name = name
        self.places: Dict[str, Place] = {}
        self.transitions: Dict[str, Transition] = {}
        self.arcs: List[Arc] = []
        self.initial_marking: List[Tuple[str, Any]] = []

    def place(self, place_id: str, name: Optional[str] = None,
              description: Optional[str] = None) -> PlaceRef:
        """Declare a place; name defaults to the id"""
        if place_id in self.places or place_id in self.transitions:
            raise ConstructionError(f"Node id {place_id!r} already declared in {self.name}")
        self.places[place_id] = Place(place_id, name or place_id, description)
        return PlaceRef(place_id)

    def action(self, name: str, handler: Optional[HandlerFunc] = None, id: Optional[str] = None,
               description: Optional[str] = None, guard: Optional[GuardFunc] = None) -> TransitionRef:
        """Declare a transition; id defaults to the name with ':' replaced by '_'"""
        transition_id = id or name.replace(':', '_')
        if transition_id in self.places or transition_id in self.transitions:
            raise ConstructionError(f"Node id {transition_id!r} already declared in {self.name}")
        self.transitions[transition_id] = Transition(
            transition_id, name, description, guard=guard, handler=handler
        )
        return TransitionRef(transition_id, name)

    def transition(self, name: str, id: Optional[str] = None,
                   description: Optional[str] = None, guard: Optional[GuardFunc] = None):
        """Decorator for a transition handler

            @builder.transition("search:files", description="Search for files")
            async def search_files(binding):
                return {...}
        """
        def decorator(func: HandlerFunc) -> TransitionRef:
            return self.action(name, func, id=id, description=description or func.__doc__,
                               guard=guard)

        return decorator

    def arc(self, source: Any, target: Any, weight: int = 1,
            pattern: Optional[PatternFunc] = None, expression: Optional[ExpressionFunc] = None,
            id: Optional[str] = None) -> ArcChain:
        """Create an arc and return chainable ArcChain"""
        if type(source) is type(target):
            raise ConstructionError(
                f"Cannot connect {type(source).__name__} to {type(target).__name__} directly. "
                f"Arcs must alternate between places and transitions."
            )

        arc_id = id or self._next_arc_id(source.id, target.id)
        self.arcs.append(Arc(arc_id, source.id, target.id, weight, pattern, expression))
        return ArcChain(self, target)

    def _next_arc_id(self, source_id: str, target_id: str) -> str:
        base = f"{source_id}->{target_id}"
        taken = {arc.id for arc in self.arcs}
        arc_id, n = base, 1
        while arc_id in taken:
            n += 1
            arc_id = f"{base}#{n}"
        return arc_id

    def token(self, place: PlaceRef, color: Any = None) -> None:
        """Add a token to the initial marking of every built net"""
        self.initial_marking.append((place.id, color))

    def build(self) -> ColoredNet:
        net = ColoredNet()
        for place in self.places.values():
            net.add_place(place)
        for transition in self.transitions.values():
            net.add_transition(transition)
        for arc in self.arcs:
            net.add_arc(arc)
        for place_id, color in self.initial_marking:
            net.add_token(place_id, color)
        return net


class ColoredNetDSL:
    """Module-level API for colored net definition"""

    @staticmethod
    def net(func: Callable) -> Callable:
        """
        Decorator for defining a colored net.
        The decorated function receives a NetBuilder as its parameter; the
        returned function gains create() and to_mermaid().
        """
        builder = NetBuilder(func.__name__)
        func(builder)

        from ..util import to_mermaid

        func._builder = builder
        func.create = builder.build
        func.to_mermaid = lambda: to_mermaid(builder.build().get_state())

        return func


cpn = ColoredNetDSL()
