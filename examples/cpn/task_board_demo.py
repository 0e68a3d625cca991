#!/usr/bin/env python3
"""
Task Board Demo
- Move two tasks across the board, rejecting one review
- Print the Mermaid diagram of the final marking
"""

import asyncio

from stroma.cpn import to_mermaid
from stroma.workflows import create_task_board_net


async def main():
    net = create_task_board_net()
    net.add_token("backlog", {"title": "Write docs"})
    net.add_token("backlog", {"title": "Fix login"})

    for step in ["start_task", "complete_task", "review_reject", "complete_task",
                 "review_approve", "start_task"]:
        task = await net.fire_transition(step)
        print(f"[{step}] {task}")

    print()
    print(to_mermaid(net.get_state()))


if __name__ == "__main__":
    asyncio.run(main())
