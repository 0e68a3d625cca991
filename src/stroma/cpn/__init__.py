from .core import (
    Token,
    Place,
    Transition,
    Arc,
    Binding,
    SemanticHint,
    NetState,
    ColoredNet,
    NetBuilder,
    NetDecorator,
    cpn,
)

from .exceptions import (
    BlockReason,
    NetError,
    ConstructionError,
    UnknownEntityError,
    NotEnabledError,
    HandlerError,
    HandlerTimeoutError,
    NestedFiringError,
)

from .hints import ContextualHint, HintingNet, generate_contextual_hint, find_enabling_path
from .util import to_mermaid

__all__ = [
    "Token",
    "Place",
    "Transition",
    "Arc",
    "Binding",
    "SemanticHint",
    "NetState",
    "ColoredNet",
    "NetBuilder",
    "NetDecorator",
    "cpn",
    # Errors
    "BlockReason",
    "NetError",
    "ConstructionError",
    "UnknownEntityError",
    "NotEnabledError",
    "HandlerError",
    "HandlerTimeoutError",
    "NestedFiringError",
    # Diagnostics
    "ContextualHint",
    "HintingNet",
    "generate_contextual_hint",
    "find_enabling_path",
    # Util
    "to_mermaid",
]
