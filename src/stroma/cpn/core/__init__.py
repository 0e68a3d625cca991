#!/usr/bin/env python3
"""
stroma.cpn.core - Colored Petri net engine

Public API for declaring, querying and firing colored nets.
"""

from .specs import (
    Token,
    Place,
    Transition,
    Arc,
    Binding,
    SemanticHint,
    PlaceView,
    NetState,
)

from .builder import (
    NetBuilder,
    ArcChain,
    PlaceRef,
    TransitionRef,
    ColoredNetDSL,
    cpn,
)

from .runtime import (
    PlaceRuntime,
    ColoredNet,
    calculate_confidence,
    generate_example,
)

from .decorator import NetDecorator

__all__ = [
    # Core types
    'Token',
    'Place',
    'Transition',
    'Arc',
    'Binding',

    # Projections
    'SemanticHint',
    'PlaceView',
    'NetState',

    # Builder
    'NetBuilder',
    'ArcChain',
    'PlaceRef',
    'TransitionRef',
    'ColoredNetDSL',

    # Main API
    'cpn',

    # Runtime
    'PlaceRuntime',
    'ColoredNet',
    'NetDecorator',
    'calculate_confidence',
    'generate_example',
]
