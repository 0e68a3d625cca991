#!/usr/bin/env python3
"""
Analytics CLI tests.

The CLI calls asyncio.run() itself, so these tests are synchronous and seed
their logs by writing JSONL directly.

Run with: pytest tests/spores/test_analytics_cli.py -v
"""

import json

import pytest

from stroma.spores import analytics
from stroma.spores import config as config_module
from stroma.spores.models import ErrorType, ToolCallEvent


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setenv('STROMA_LOG_PATH', str(tmp_path / 'default'))
    config_module._config = None
    yield
    config_module._config = None


def write_jsonl(path, records):
    path.write_text(''.join(json.dumps(r) + '\n' for r in records))


@pytest.fixture
def seeded_logs(tmp_path):
    write_jsonl(tmp_path / 'tool_calls.jsonl', [
        {'timestamp': 1, 'session_id': 's1', 'tool_name': 'search:files', 'transition_id': 'search_files',
         'confidence': 0.6, 'success': True, 'execution_time_ms': 1.0},
        {'timestamp': 2, 'session_id': 's1', 'tool_name': 'write:file', 'transition_id': 'write_file',
         'confidence': 0.0, 'success': False, 'execution_time_ms': 1.0, 'error_type': 'missing_tokens'},
        {'timestamp': 3, 'session_id': 's2', 'tool_name': 'search:files', 'transition_id': 'search_files',
         'confidence': 0.6, 'success': True, 'execution_time_ms': 1.0},
    ])
    write_jsonl(tmp_path / 'workflow_paths.jsonl', [
        {'session_id': 's1', 'sequence': ['search:files', 'write:file'], 'confidence_scores': [0.6, 0.0],
         'total_tools': 2, 'unique_tools': 2, 'avg_confidence': 0.3, 'path_efficiency': 0.5},
        {'session_id': 's2', 'sequence': ['search:files'], 'confidence_scores': [0.6],
         'total_tools': 1, 'unique_tools': 1, 'avg_confidence': 0.6, 'path_efficiency': 1.0},
    ])
    return tmp_path


class TestCommands:
    def test_analyze(self, seeded_logs, capsys):
        assert analytics.main(['analyze', '--log-path', str(seeded_logs)]) == 0

        out = capsys.readouterr().out
        assert 'Sessions: 2' in out
        assert 'Total tool calls: 3' in out
        assert 'Avg tools per session: 1.50' in out
        assert 'Average confidence: 45.0%' in out
        assert 'Path efficiency: 75.0%' in out
        assert '1. search:files → write:file (1x)' in out

    def test_analyze_is_default(self, seeded_logs, capsys):
        analytics.main(['--log-path', str(seeded_logs)])
        assert 'Workflow Analytics Report' in capsys.readouterr().out

    def test_analyze_without_logs(self, tmp_path, capsys):
        analytics.main(['analyze', '--log-path', str(tmp_path / 'empty')])
        assert 'No workflow patterns found yet' in capsys.readouterr().out

    def test_insights(self, seeded_logs, capsys):
        analytics.main(['insights', '--log-path', str(seeded_logs)])

        out = capsys.readouterr().out
        search_line = next(line for line in out.splitlines() if line.startswith('search:files'))
        assert '100.0%' in search_line
        assert 'missing_tokens: 1' in out

    def test_help(self, capsys):
        analytics.main(['help'])
        assert 'insights' in capsys.readouterr().out

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            analytics.main(['explode'])


class TestSummaries:
    def test_tool_usage(self):
        calls = [
            ToolCallEvent(1, 's', 'a', 'a', 0.5, True, 1.0),
            ToolCallEvent(2, 's', 'b', 'b', 0.5, False, 1.0, error_type=ErrorType.HANDLER_ERROR),
            ToolCallEvent(3, 's', 'b', 'b', 0.7, True, 1.0),
        ]

        usage = analytics.tool_usage(calls)

        assert [(u.tool_name, u.calls) for u in usage] == [('b', 2), ('a', 1)]
        assert usage[0].success_rate == 0.5
        assert usage[0].avg_confidence == pytest.approx(0.6)
        assert analytics.error_breakdown(calls) == {'handler_error': 1}

    def test_recorded_session_stats_empty(self):
        stats = analytics.recorded_session_stats([])
        assert stats.active_sessions == 0
        assert stats.avg_session_length == 0.0
