#!/usr/bin/env python3
"""
Spores File Transports

JSONL file transports for analytics records, plus the matching reader.
Files are opened on the first write so a disabled logger never touches disk.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

logger = logging.getLogger(__name__)


class AsyncFileTransport:
    """
    Asynchronous file transport.

    Appends one record per line, running the blocking I/O through
    asyncio.to_thread() so the event loop is never blocked on disk.
    """

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)
        self._file: Optional[TextIO] = None
        self._lock = asyncio.Lock()

    async def send(self, data: bytes, content_type: str) -> None:
        """
        Append data to the file.

        Args:
            data: Encoded record
            content_type: MIME content type (e.g., "application/json")
        """
        async with self._lock:
            await asyncio.to_thread(self._write_sync, data)

    def _write_sync(self, data: bytes) -> None:
        if self._file is None:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.filepath, 'a', encoding='utf-8')
        self._file.write(data.decode('utf-8') + '\n')
        self._file.flush()

    async def close(self) -> None:
        """Close the file handle asynchronously."""
        async with self._lock:
            if self._file and not self._file.closed:
                await asyncio.to_thread(self._file.close)
            self._file = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def read_jsonl(filepath: str | Path) -> List[Dict[str, Any]]:
    """
    Read every record of a JSONL file.

    A missing file reads as empty; lines that are not JSON objects are skipped
    with a warning.
    """
    path = Path(filepath)
    if not path.exists():
        return []

    records: List[Dict[str, Any]] = []
    with open(path, 'r', encoding='utf-8') as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed line %d in %s", lineno, path)
                continue
            if isinstance(record, dict):
                records.append(record)
    return records
