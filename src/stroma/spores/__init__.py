#!/usr/bin/env python3
"""
Spores - Workflow Analytics

Records how callers move through a colored net: every firing attempt becomes
a ToolCallEvent, calls are grouped into sessions by recent activity, and each
closed session is summarised as a WorkflowPath. Records are appended as JSONL.

Usage:
    ```python
    from stroma import spores
    from stroma.spores import RecordingNet, WorkflowLogger

    spores.configure(log_path="logs/")
    async with WorkflowLogger() as workflow_logger:
        net = RecordingNet(create_file_operations_net(), workflow_logger)
        net.add_token("start", {})
        await net.fire_transition("search_files", {"query": "*.ts"})
    ```
"""

from .config import (
    LoggerConfig,
    config_from_env,
    configure,
    get_config,
)
from .core import WorkflowLogger
from .dsl import RecordingNet
from .models import (
    ErrorType,
    SessionInfo,
    ToolCallEvent,
    WorkflowPath,
    SessionStats,
    PathFrequency,
    PathPatterns,
    analyze_workflow_path,
    generate_session_id,
)
from .encoder import Encoder, JSONEncoder
from .transport import AsyncTransport, AsyncFileTransport

__all__ = [
    # Configuration
    'LoggerConfig',
    'config_from_env',
    'configure',
    'get_config',

    # Logging
    'WorkflowLogger',
    'RecordingNet',

    # Models
    'ErrorType',
    'SessionInfo',
    'ToolCallEvent',
    'WorkflowPath',
    'SessionStats',
    'PathFrequency',
    'PathPatterns',
    'analyze_workflow_path',
    'generate_session_id',

    # Encoders and transports
    'Encoder',
    'JSONEncoder',
    'AsyncTransport',
    'AsyncFileTransport',
]
