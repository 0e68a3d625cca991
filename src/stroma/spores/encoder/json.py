#!/usr/bin/env python3
"""
Spores JSON Encoder

Compact JSON encoding for analytics records, one object per JSONL line.
"""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from .base import Encoder


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


class JSONEncoder(Encoder):
    """
    JSON encoder for analytics records.

    Example output:
        {"timestamp":1700000000000,"session_id":"20231114-221320-1a2b3c4d",
         "tool_name":"search:files","transition_id":"search_files",
         "confidence":0.6,"success":true,"execution_time_ms":1.2,
         "error_type":null,...}

    Values json cannot represent (token colors in context_data, say) are
    written as their str().
    """

    def encode(self, record: Any) -> bytes:
        return json.dumps(_to_plain(record), separators=(',', ':'), default=str).encode('utf-8')

    def decode(self, data: bytes) -> dict:
        return json.loads(data.decode('utf-8'))

    def content_type(self) -> str:
        """Return the JSON content type."""
        return "application/json"
