#!/usr/bin/env python3
"""
Spores Transports

Transports for writing encoded analytics records.
"""

from .base import AsyncTransport
from .file import AsyncFileTransport, read_jsonl

__all__ = [
    'AsyncTransport',
    'AsyncFileTransport',
    'read_jsonl',
]
