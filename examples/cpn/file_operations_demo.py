#!/usr/bin/env python3
"""
File Operations Demo
- Seed the start place
- Print ranked next actions after every step
- Show the contextual hint for a premature write
"""

import asyncio

from stroma.cpn import HintingNet, NotEnabledError
from stroma.workflows import REQUIREMENT_DESCRIPTIONS, create_file_operations_net


def show_hints(net):
    for hint in net.get_enabled_transitions():
        print(f"  {hint.transition_name:<20} {hint.confidence:.0%}  {hint.example}")


async def main():
    print("File Operations Demo")
    net = HintingNet(create_file_operations_net(), REQUIREMENT_DESCRIPTIONS)
    net.add_token("start", {})

    print("\nEnabled at start:")
    show_hints(net)

    print("\nTrying write:file too early...")
    try:
        await net.fire_transition("write_file")
    except NotEnabledError as e:
        print(f"  {e}")

    result = await net.fire_transition("search_files", {"query": "*.ts"})
    print(f"\nsearch:files -> {result['results']}")
    show_hints(net)

    content = await net.fire_transition("search_read")
    print(f"\nsearch:file:read -> {content['path']}")
    show_hints(net)

    written = await net.fire_transition("modify_write")
    print(f"\nmodify:file:write ->\n{written['content']}")
    print(f"\nFinal marking: {net.marking()}")


if __name__ == "__main__":
    asyncio.run(main())
