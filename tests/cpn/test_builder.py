#!/usr/bin/env python3
"""
Builder, @cpn.net decorator and Mermaid rendering tests.

Run with: pytest tests/cpn/test_builder.py -v
"""

import pytest

from stroma.cpn import ColoredNet, ConstructionError, NetBuilder, cpn, to_mermaid
from stroma.cpn.core import ArcChain, PlaceRef, TransitionRef


class TestNetBuilder:
    def test_place_and_action_refs(self):
        builder = NetBuilder("Demo")
        place = builder.place('inbox', 'Inbox')
        action = builder.action('read:file')

        assert isinstance(place, PlaceRef) and place.id == 'inbox'
        assert isinstance(action, TransitionRef)
        assert action.id == 'read_file'
        assert action.name == 'read:file'

    def test_duplicate_ids_rejected(self):
        builder = NetBuilder("Demo")
        builder.place('x')
        with pytest.raises(ConstructionError):
            builder.action('x')

    def test_arc_between_places_rejected(self):
        builder = NetBuilder("Demo")
        a = builder.place('a')
        b = builder.place('b')
        with pytest.raises(ConstructionError, match="alternate"):
            builder.arc(a, b)

    def test_arc_chain(self):
        builder = NetBuilder("Demo")
        a = builder.place('a')
        t = builder.action('move')
        b = builder.place('b')

        chain = builder.arc(a, t).arc(b)

        assert isinstance(chain, ArcChain)
        assert [(arc.source, arc.target) for arc in builder.arcs] == [('a', 'move'), ('move', 'b')]

    def test_default_arc_ids_are_unique(self):
        builder = NetBuilder("Demo")
        a = builder.place('a')
        t = builder.action('pair')
        builder.arc(a, t)
        builder.arc(a, t)
        assert [arc.id for arc in builder.arcs] == ['a->pair', 'a->pair#2']

    def test_transition_decorator_uses_docstring(self):
        builder = NetBuilder("Demo")

        @builder.transition('clean:data')
        async def clean(binding):
            """Remove empty rows"""
            return binding

        assert clean.id == 'clean_data'
        assert builder.transitions['clean_data'].description == 'Remove empty rows'
        assert builder.transitions['clean_data'].handler is not None

    @pytest.mark.asyncio
    async def test_build_produces_independent_nets(self):
        builder = NetBuilder("Demo")
        a = builder.place('a')
        t = builder.action('take')
        b = builder.place('b')
        builder.arc(a, t).arc(b)
        builder.token(a, 'seed')

        first = builder.build()
        second = builder.build()
        await first.fire_transition('take')

        assert isinstance(first, ColoredNet)
        assert first.marking() == {'a': 0, 'b': 1}
        assert second.marking() == {'a': 1, 'b': 0}


@cpn.net
def Relay(builder):
    inbox = builder.place('inbox', 'Inbox')
    outbox = builder.place('outbox', 'Outbox')
    relay = builder.action('relay:message', description='Forward a message')
    builder.arc(inbox, relay, weight=2).arc(outbox)
    builder.token(inbox, 'hello')


class TestNetDecorator:
    def test_create_builds_seeded_net(self):
        net = Relay.create()
        assert net.marking() == {'inbox': 1, 'outbox': 0}
        assert net.get_transition('relay_message').description == 'Forward a message'

    def test_to_mermaid(self):
        diagram = Relay.to_mermaid()

        assert diagram.splitlines()[0] == "graph TD"
        assert '    inbox(("Inbox [1]"))' in diagram
        assert '    outbox(("Outbox"))' in diagram
        assert '    relay_message["relay:message"]' in diagram
        assert '    inbox -->|weight=2| relay_message' in diagram
        assert '    relay_message --> outbox' in diagram

    def test_mermaid_sanitizes_ids(self):
        builder = NetBuilder("Odd")
        p = builder.place('has-dash')
        t = builder.action('go', id='go.now')
        builder.arc(p, t)

        diagram = to_mermaid(builder.build().get_state())

        assert 'has_dash(("has-dash"))' in diagram
        assert 'go_now["go"]' in diagram
