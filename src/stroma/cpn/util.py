#!/usr/bin/env python3
"""
Colored net rendering helpers.
"""

from __future__ import annotations

import re

from .core.specs import NetState


def _node_id(raw: str) -> str:
    """Mermaid node ids must be plain identifiers"""
    return re.sub(r'[^A-Za-z0-9_]', '_', raw)


def to_mermaid(state: NetState) -> str:
    """
    Generate a Mermaid diagram of a net snapshot.

    Places render as circles labelled with their token count, transitions as
    boxes labelled with their structured name.
    """
    lines = ["graph TD"]

    for place in state.places:
        count = len(place.tokens)
        marker = f" [{count}]" if count else ""
        lines.append(f'    {_node_id(place.id)}(("{place.name}{marker}"))')

    for transition in state.transitions:
        lines.append(f'    {_node_id(transition.id)}["{transition.name}"]')

    for arc in state.arcs:
        weight_label = f"|weight={arc.weight}|" if arc.weight > 1 else ""
        lines.append(f"    {_node_id(arc.source)} -->{weight_label} {_node_id(arc.target)}")

    return "\n".join(lines)
