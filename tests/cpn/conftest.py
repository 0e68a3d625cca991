"""Pytest fixtures for colored net tests"""

import pytest

from stroma.cpn import Arc, ColoredNet, Place, Transition


def make_net(places, transitions, arcs):
    """Small helper: places as ids, transitions as Transition, arcs as (src, tgt[, weight])"""
    net = ColoredNet()
    for place_id in places:
        net.add_place(Place(place_id, place_id.replace('_', ' ').title()))
    for transition in transitions:
        net.add_transition(transition)
    for i, spec in enumerate(arcs):
        source, target, *rest = spec
        weight = rest[0] if rest else 1
        net.add_arc(Arc(f"a{i}", source, target, weight))
    return net


@pytest.fixture
def pipeline():
    """inbox -> process -> outbox, handler doubles the color"""

    async def double(binding):
        return binding['inbox_token'] * 2

    return make_net(
        ['inbox', 'outbox'],
        [Transition('process', 'process:item', handler=double)],
        [('inbox', 'process'), ('process', 'outbox')],
    )


@pytest.fixture
def net_factory():
    return make_net
