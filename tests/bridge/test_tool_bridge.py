#!/usr/bin/env python3
"""
Tool bridge tests: naming, schemas, prioritisation and result rendering.

Run with: pytest tests/bridge/test_tool_bridge.py -v
"""

import pytest

from stroma.bridge import (
    NEXT_ACTIONS_TOOL,
    HintFormat,
    ToolBridge,
    ToolDescriptor,
    ToolResult,
    input_schema,
    to_tool_name,
)
from stroma.cpn import HintingNet, NetBuilder, UnknownEntityError
from stroma.workflows import REQUIREMENT_DESCRIPTIONS, create_file_operations_net


@pytest.fixture
def net():
    net = create_file_operations_net()
    net.add_token('start', {})
    return net


@pytest.fixture
def bridge(net):
    return ToolBridge(net, REQUIREMENT_DESCRIPTIONS)


class TestNaming:
    @pytest.mark.parametrize("name,expected", [
        ('search:file:read', 'search_file_read'),
        ('search:files', 'search_files'),
        ('tick', 'tick'),
    ])
    def test_to_tool_name(self, name, expected):
        assert to_tool_name(name) == expected

    def test_schema_for_composite_name(self):
        schema = input_schema('search:file:read')

        assert schema['type'] == 'object'
        assert schema['properties']['file'] == {'type': 'string', 'description': 'The file to search'}
        assert schema['properties']['action']['enum'] == ['read']
        assert schema['properties']['context']['type'] == 'object'

    def test_schema_for_bare_verb(self):
        assert list(input_schema('tick')['properties']) == ['context']


class TestListTools:
    def test_enabled_tools_first_and_meta_tool_last(self, bridge):
        tools = bridge.list_tools()

        names = [tool.name for tool in tools]
        assert names[0] == 'search_files'
        assert names[-1] == NEXT_ACTIONS_TOOL
        assert set(names) == {
            'search_files', 'read_file', 'write_file', 'search_file_read', 'modify_file_write',
            NEXT_ACTIONS_TOOL,
        }
        assert all(isinstance(tool, ToolDescriptor) for tool in tools)

    @pytest.mark.asyncio
    async def test_order_follows_confidence(self, bridge):
        await bridge.call_tool('search_files')
        assert bridge.list_tools()[0].name == 'search_file_read'

    def test_wire_shape(self, bridge):
        wire = bridge.list_tools()[0].to_wire()
        assert set(wire) == {'name', 'description', 'inputSchema'}
        assert wire['description'] == 'Search for files by pattern'

    def test_tool_name_collision_rejected(self):
        builder = NetBuilder("Clash")
        builder.action('read:file', id='one')
        builder.action('read:file', id='two')
        with pytest.raises(Exception, match="both map to tool name"):
            ToolBridge(builder.build()).list_tools()


class TestCallTool:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, bridge):
        with pytest.raises(UnknownEntityError):
            await bridge.call_tool('does_not_exist')

    @pytest.mark.asyncio
    async def test_success_renders_result_and_next_actions(self, bridge, net):
        result = await bridge.call_tool('search_files', {'query': '*.ts'})

        assert isinstance(result, ToolResult)
        assert not result.is_error
        assert result.text.startswith('Successfully executed: search_files')
        assert '"README.md"' in result.text
        assert '- search_file_read: Search for a file and read it' in result.text
        assert net.tokens('search_results')[0].color['query'] == '*.ts'

    @pytest.mark.asyncio
    async def test_next_actions_tool(self, bridge):
        result = await bridge.call_tool(NEXT_ACTIONS_TOOL)

        assert '1. **search_files** (search:files)' in result.text
        assert 'Confidence: 60%' in result.text
        assert 'Example: `search("files")`' in result.text

    @pytest.mark.asyncio
    async def test_next_actions_when_nothing_enabled(self):
        bridge = ToolBridge(create_file_operations_net())
        result = await bridge.call_tool(NEXT_ACTIONS_TOOL)
        assert result.text.startswith('No actions are currently available')

    @pytest.mark.asyncio
    async def test_contextual_guidance(self, bridge, net):
        result = await bridge.call_tool('write_file')

        assert not result.is_error
        assert result.text == (
            "write_file needs: file content\n"
            "Try instead: search_files → search_file_read → write_file"
        )
        assert net.marking()['start'] == 1

    @pytest.mark.asyncio
    async def test_contextual_guidance_reuses_attached_hint(self, net):
        bridge = ToolBridge(HintingNet(net, {'file_read': 'loaded file'}))
        result = await bridge.call_tool('write_file')
        assert result.text.startswith('write_file needs: loaded file')

    @pytest.mark.asyncio
    async def test_brief_guidance(self, net):
        bridge = ToolBridge(net, hint_format='brief')
        result = await bridge.call_tool('write_file')
        assert result.text == "write_file: Missing prerequisites\nAvailable: search_files (60%)"

    @pytest.mark.asyncio
    async def test_verbose_guidance(self, net):
        bridge = ToolBridge(net, hint_format=HintFormat.VERBOSE)
        result = await bridge.call_tool('write_file')

        assert result.text.startswith('Cannot execute write_file at this time.')
        assert '1. **search_files**' in result.text
        assert 'Confidence: 60%' in result.text

    @pytest.mark.asyncio
    async def test_verbose_guidance_with_nothing_available(self):
        bridge = ToolBridge(create_file_operations_net(), hint_format=HintFormat.VERBOSE)
        result = await bridge.call_tool('write_file')
        assert '**No actions are currently available.**' in result.text

    @pytest.mark.asyncio
    async def test_handler_error_is_error_result(self):
        builder = NetBuilder("Broken")
        inbox = builder.place('inbox')

        @builder.transition('break:item', description='Always fails')
        async def break_item(binding):
            raise RuntimeError("disk full")

        builder.arc(inbox, break_item)
        builder.token(inbox, 'x')
        bridge = ToolBridge(builder.build())

        result = await bridge.call_tool('break_item')

        assert result.is_error
        assert result.text.startswith('Error executing break_item:')
        assert 'disk full' in result.text
        assert result.to_wire()['isError'] is True

    @pytest.mark.asyncio
    async def test_guard_blocked_guidance(self, bridge, net):
        net.add_token('file_read', {'path': 'a.ts', 'content': None})

        result = await bridge.call_tool('modify_file_write')

        assert result.text.startswith('modify_file_write is blocked')
        assert 'Try: ' in result.text
