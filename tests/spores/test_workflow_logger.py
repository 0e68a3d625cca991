#!/usr/bin/env python3
"""
WorkflowLogger tests: session grouping, JSONL output, path analysis.

Run with: pytest tests/spores/test_workflow_logger.py -v
"""

import asyncio
import json
import re

import pytest

from stroma.common.timebase import DictatedClock
from stroma.spores import (
    ErrorType,
    LoggerConfig,
    ToolCallEvent,
    WorkflowLogger,
    analyze_workflow_path,
    generate_session_id,
)

START = 1_700_000_000.0


@pytest.fixture
def clock():
    return DictatedClock(START)


@pytest.fixture
def config(tmp_path):
    return LoggerConfig(log_path=tmp_path, session_timeout_minutes=10)


@pytest.fixture
def workflow_logger(config, clock):
    return WorkflowLogger(config, timebase=clock)


def read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


async def log(workflow_logger, tool_name, success=True, confidence=0.6, **kwargs):
    return await workflow_logger.log_tool_call(
        tool_name=tool_name,
        transition_id=tool_name.replace(':', '_'),
        confidence=confidence,
        success=success,
        execution_time_ms=1.0,
        **kwargs,
    )


class TestSessionIds:
    def test_format(self):
        session_id = generate_session_id(START)
        assert re.fullmatch(r"\d{8}-\d{6}-[0-9a-f]{8}", session_id)

    def test_unique(self):
        assert generate_session_id(START) != generate_session_id(START)


class TestSessions:
    @pytest.mark.asyncio
    async def test_calls_within_timeout_share_a_session(self, workflow_logger, clock):
        first = await log(workflow_logger, 'search:files')
        clock.advance(9 * 60)
        second = await log(workflow_logger, 'search:file:read')

        assert first.session_id == second.session_id
        assert workflow_logger.get_session_stats().total_tool_calls == 2

    @pytest.mark.asyncio
    async def test_gap_beyond_timeout_starts_new_session(self, workflow_logger, clock):
        first = await log(workflow_logger, 'search:files')
        clock.advance(11 * 60)
        second = await log(workflow_logger, 'search:files')

        assert first.session_id != second.session_id

    @pytest.mark.asyncio
    async def test_session_stats(self, workflow_logger):
        for _ in range(3):
            await log(workflow_logger, 'search:files')

        stats = workflow_logger.get_session_stats()

        assert stats.active_sessions == 1
        assert stats.total_tool_calls == 3
        assert stats.avg_session_length == 3.0

    def test_empty_stats(self, workflow_logger):
        stats = workflow_logger.get_session_stats()
        assert (stats.active_sessions, stats.total_tool_calls, stats.avg_session_length) == (0, 0, 0.0)

    @pytest.mark.asyncio
    async def test_expire_sessions_writes_paths(self, workflow_logger, clock, tmp_path):
        event = await log(workflow_logger, 'search:files')
        await log(workflow_logger, 'search:file:read', confidence=0.8, success=False,
                  error_type=ErrorType.MISSING_TOKENS)

        assert await workflow_logger.expire_sessions() == []
        clock.advance(10 * 60)
        assert await workflow_logger.expire_sessions() == [event.session_id]

        assert workflow_logger.sessions == {}
        [path] = read_lines(tmp_path / 'workflow_paths.jsonl')
        assert path['session_id'] == event.session_id
        assert path['sequence'] == ['search:files', 'search:file:read']
        assert path['path_efficiency'] == 0.5


class TestRecording:
    @pytest.mark.asyncio
    async def test_tool_call_written_as_jsonl(self, workflow_logger, tmp_path):
        await log(workflow_logger, 'search:files', input_tokens=['start_token'],
                  output_tokens=['search_results'], next_enabled_transitions=['search:file:read'])

        [record] = read_lines(tmp_path / 'tool_calls.jsonl')

        assert record['tool_name'] == 'search:files'
        assert record['transition_id'] == 'search_files'
        assert record['timestamp'] == int(START * 1000)
        assert record['success'] is True
        assert record['error_type'] is None
        assert record['input_tokens'] == ['start_token']
        assert record['next_enabled_transitions'] == ['search:file:read']

    @pytest.mark.asyncio
    async def test_error_type_serialized_by_value(self, workflow_logger, tmp_path):
        await log(workflow_logger, 'write:file', success=False,
                  error_type=ErrorType.GUARD_FAILED, error_message='no content')

        [record] = read_lines(tmp_path / 'tool_calls.jsonl')

        assert record['error_type'] == 'guard_failed'
        assert ToolCallEvent.from_dict(record).error_type is ErrorType.GUARD_FAILED

    @pytest.mark.asyncio
    async def test_disabled_logger_writes_nothing(self, tmp_path, clock):
        workflow_logger = WorkflowLogger(LoggerConfig(log_path=tmp_path / 'logs', enabled=False),
                                         timebase=clock)

        assert await log(workflow_logger, 'search:files') is None
        assert await workflow_logger.log_workflow_path('anything') is None
        assert not (tmp_path / 'logs').exists()

    @pytest.mark.asyncio
    async def test_write_failures_are_swallowed(self, tmp_path, clock, caplog):
        blocker = tmp_path / 'not-a-dir'
        blocker.write_text('occupied')
        workflow_logger = WorkflowLogger(LoggerConfig(log_path=blocker), timebase=clock)

        event = await log(workflow_logger, 'search:files')

        assert event is not None
        assert 'Failed to write tool_calls record' in caplog.text

    @pytest.mark.asyncio
    async def test_session_tool_calls_read_back_in_order(self, workflow_logger, clock):
        first = await log(workflow_logger, 'search:files')
        clock.advance(1)
        await log(workflow_logger, 'search:file:read')

        calls = await workflow_logger.get_session_tool_calls(first.session_id)

        assert [c.tool_name for c in calls] == ['search:files', 'search:file:read']

    @pytest.mark.asyncio
    async def test_malformed_lines_skipped(self, workflow_logger, tmp_path):
        event = await log(workflow_logger, 'search:files')
        with open(tmp_path / 'tool_calls.jsonl', 'a') as f:
            f.write('{not json\n')

        calls = await workflow_logger.get_session_tool_calls(event.session_id)

        assert len(calls) == 1


class TestPathAnalysis:
    def test_analyze_workflow_path(self):
        calls = [
            ToolCallEvent(1, 's', 'search:files', 'search_files', 0.6, True, 1.0),
            ToolCallEvent(2, 's', 'write:file', 'write_file', 0.0, False, 1.0),
            ToolCallEvent(3, 's', 'search:files', 'search_files', 0.6, True, 1.0),
        ]

        path = analyze_workflow_path(calls)

        assert path.sequence == ['search:files', 'write:file', 'search:files']
        assert path.total_tools == 3
        assert path.unique_tools == 2
        assert path.avg_confidence == pytest.approx(0.4)
        assert path.path_efficiency == pytest.approx(2 / 3)

    @pytest.mark.asyncio
    async def test_log_workflow_path_without_calls(self, workflow_logger):
        assert await workflow_logger.log_workflow_path('unknown') is None

    @pytest.mark.asyncio
    async def test_path_patterns(self, workflow_logger, clock):
        for sequence in (['a', 'b'], ['a', 'b'], ['c']):
            for tool in sequence:
                await log(workflow_logger, tool, confidence=0.5)
            clock.advance(60 * 60)
            await workflow_logger.expire_sessions()

        patterns = await workflow_logger.analyze_path_patterns()

        assert [(p.sequence, p.frequency) for p in patterns.common_paths] == [(['a', 'b'], 2), (['c'], 1)]
        assert patterns.average_confidence == pytest.approx(0.5)
        assert patterns.path_efficiency == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_patterns_empty(self, workflow_logger):
        patterns = await workflow_logger.analyze_path_patterns()
        assert patterns.common_paths == []
        assert patterns.average_confidence == 0.0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_background_cleanup(self, workflow_logger, clock):
        event = await log(workflow_logger, 'search:files')
        workflow_logger.start(interval=60)
        await asyncio.sleep(0)

        clock.advance(11 * 60)
        # file I/O runs in a worker thread
        for _ in range(50):
            if not workflow_logger.sessions:
                break
            await asyncio.sleep(0.01)

        assert event.session_id not in workflow_logger.sessions
        await workflow_logger.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_flushes_open_sessions(self, workflow_logger, tmp_path):
        await log(workflow_logger, 'search:files')

        await workflow_logger.shutdown()

        assert workflow_logger.sessions == {}
        assert len(read_lines(tmp_path / 'workflow_paths.jsonl')) == 1

    @pytest.mark.asyncio
    async def test_async_context_manager(self, config, clock):
        async with WorkflowLogger(config, timebase=clock) as workflow_logger:
            await log(workflow_logger, 'search:files')
        assert workflow_logger.sessions == {}
