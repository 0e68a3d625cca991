#!/usr/bin/env python3
"""
JSON encoder and JSONL file transport tests.

Run with: pytest tests/spores/test_json_encoder.py -v
"""

import json

import pytest

from stroma.spores import AsyncFileTransport, ErrorType, JSONEncoder, ToolCallEvent
from stroma.spores.transport import read_jsonl


class TestJSONEncoder:
    def test_compact_single_line(self):
        event = ToolCallEvent(1, 's', 'search:files', 'search_files', 0.6, True, 2.5,
                              error_type=ErrorType.OTHER, context_data={'tags': {'a'}})
        data = JSONEncoder().encode(event)

        assert b'\n' not in data
        assert b', ' not in data
        decoded = json.loads(data)
        assert decoded['error_type'] == 'other'
        assert decoded['context_data']['tags'] == "{'a'}"

    def test_decode_round_trip(self):
        encoder = JSONEncoder()
        assert encoder.decode(encoder.encode({'a': [1, 2]})) == {'a': [1, 2]}
        assert encoder.content_type() == 'application/json'


class TestAsyncFileTransport:
    @pytest.mark.asyncio
    async def test_appends_lines(self, tmp_path):
        path = tmp_path / 'nested' / 'out.jsonl'
        async with AsyncFileTransport(path) as transport:
            await transport.send(b'{"n":1}', 'application/json')
            await transport.send(b'{"n":2}', 'application/json')

        assert path.read_text() == '{"n":1}\n{"n":2}\n'
        assert read_jsonl(path) == [{'n': 1}, {'n': 2}]

    @pytest.mark.asyncio
    async def test_nothing_created_until_first_send(self, tmp_path):
        transport = AsyncFileTransport(tmp_path / 'lazy' / 'out.jsonl')
        await transport.close()
        assert not (tmp_path / 'lazy').exists()

    def test_read_missing_file(self, tmp_path):
        assert read_jsonl(tmp_path / 'missing.jsonl') == []

    def test_read_skips_non_objects(self, tmp_path):
        path = tmp_path / 'mixed.jsonl'
        path.write_text('[1, 2]\n\n{"ok": true}\nnot json\n')
        assert read_jsonl(path) == [{'ok': True}]
