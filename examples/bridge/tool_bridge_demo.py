#!/usr/bin/env python3
"""
Tool Bridge Demo

Lists the file operation tools in priority order, then walks a short session
the way a tool-calling model would, recording every call.

Logs go to STROMA_LOG_PATH (default ~/.stroma-workflow-logs); inspect them
afterwards with `stroma-analytics`.
"""

import asyncio
import json

from stroma.bridge import NEXT_ACTIONS_TOOL, ToolBridge
from stroma.cpn import HintingNet
from stroma.spores import RecordingNet, WorkflowLogger
from stroma.workflows import REQUIREMENT_DESCRIPTIONS, create_file_operations_net


async def main():
    async with WorkflowLogger() as workflow_logger:
        net = RecordingNet(
            HintingNet(create_file_operations_net(), REQUIREMENT_DESCRIPTIONS),
            workflow_logger,
            context_data={"client": "tool_bridge_demo"},
        )
        net.add_token("start", {})
        bridge = ToolBridge(net, REQUIREMENT_DESCRIPTIONS)

        print(json.dumps([tool.to_wire() for tool in bridge.list_tools()][:2], indent=2))

        for name, arguments in [
            ("write_file", None),
            (NEXT_ACTIONS_TOOL, None),
            ("search_files", {"query": "*.ts"}),
            ("search_file_read", None),
            ("write_file", None),
        ]:
            result = await bridge.call_tool(name, arguments)
            print(f"\n>>> {name}\n{result.text}")


if __name__ == "__main__":
    asyncio.run(main())
