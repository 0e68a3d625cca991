#!/usr/bin/env python3
"""
Workflow analytics CLI.

Reads the JSONL logs written by WorkflowLogger and reports how callers move
through a net.

Usage:
    stroma-analytics              # same as "analyze"
    stroma-analytics analyze
    stroma-analytics insights
    stroma-analytics help
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .config import LoggerConfig, get_config
from .core import PATH_SEPARATOR, WorkflowLogger
from .models import SessionStats, ToolCallEvent

SHOWN_PATHS = 5


@dataclass
class ToolUsage:
    tool_name: str
    calls: int
    success_rate: float
    avg_confidence: float


def recorded_session_stats(calls: List[ToolCallEvent]) -> SessionStats:
    """Session statistics over everything on disk, not just live sessions"""
    per_session = Counter(call.session_id for call in calls)
    count = len(per_session)
    return SessionStats(
        active_sessions=count,
        total_tool_calls=len(calls),
        avg_session_length=len(calls) / count if count else 0.0,
    )


def tool_usage(calls: List[ToolCallEvent]) -> List[ToolUsage]:
    """Per-tool call counts, most used first"""
    grouped: Dict[str, List[ToolCallEvent]] = defaultdict(list)
    for call in calls:
        grouped[call.tool_name].append(call)

    usage = [
        ToolUsage(
            tool_name=name,
            calls=len(group),
            success_rate=sum(1 for c in group if c.success) / len(group),
            avg_confidence=sum(c.confidence for c in group) / len(group),
        )
        for name, group in grouped.items()
    ]
    usage.sort(key=lambda u: u.calls, reverse=True)
    return usage


def error_breakdown(calls: List[ToolCallEvent]) -> Counter:
    return Counter(call.error_type.value for call in calls if call.error_type is not None)


async def analyze_workflows(config: LoggerConfig) -> None:
    workflow_logger = WorkflowLogger(config)
    calls = await workflow_logger.get_tool_calls()
    stats = recorded_session_stats(calls)
    patterns = await workflow_logger.analyze_path_patterns()

    print("Workflow Analytics Report")
    print("=========================\n")

    print("Session Statistics:")
    print(f"  Sessions: {stats.active_sessions}")
    print(f"  Total tool calls: {stats.total_tool_calls}")
    print(f"  Avg tools per session: {stats.avg_session_length:.2f}")
    print()

    print("Path Patterns:")
    print(f"  Average confidence: {patterns.average_confidence * 100:.1f}%")
    print(f"  Path efficiency: {patterns.path_efficiency * 100:.1f}%")
    print()

    if patterns.common_paths:
        print("Most Common Workflows:")
        for index, path in enumerate(patterns.common_paths[:SHOWN_PATHS], start=1):
            print(f"  {index}. {PATH_SEPARATOR.join(path.sequence)} ({path.frequency}x)")
    else:
        print("No workflow patterns found yet. Record some sessions first.")

    await workflow_logger.shutdown()


async def print_insights(config: LoggerConfig) -> None:
    workflow_logger = WorkflowLogger(config)
    calls = await workflow_logger.get_tool_calls()

    print("Tool Usage Insights")
    print("===================\n")

    if not calls:
        print("No tool calls recorded yet.")
        return

    print(f"{'Tool':<28} {'Calls':>6} {'Success':>8} {'Confidence':>11}")
    for usage in tool_usage(calls):
        print(f"{usage.tool_name:<28} {usage.calls:>6} "
              f"{usage.success_rate * 100:>7.1f}% {usage.avg_confidence * 100:>10.1f}%")
    print()

    errors = error_breakdown(calls)
    if errors:
        print("Failures by kind:")
        for kind, count in errors.most_common():
            print(f"  {kind}: {count}")
    else:
        print("No failed tool calls recorded.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stroma-analytics",
        description="Workflow Analytics Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  analyze    Show workflow analysis (default)
  insights   Show per-tool success rates and failure kinds
  help       Show this help message

Logs are read from STROMA_LOG_PATH (default ~/.stroma-workflow-logs).
        """,
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="analyze",
        choices=["analyze", "insights", "help"],
        help="What to report (default: analyze)",
    )
    parser.add_argument(
        "--log-path",
        type=str,
        help="Read logs from this directory instead of the configured one",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.log_path:
        config = LoggerConfig(
            log_path=args.log_path,
            session_timeout_minutes=config.session_timeout_minutes,
            enabled=config.enabled,
            log_level=config.log_level,
        )
    logging.basicConfig(level=config.logging_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "analyze":
        asyncio.run(analyze_workflows(config))
    elif args.command == "insights":
        asyncio.run(print_insights(config))
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
