#!/usr/bin/env python3
"""
Spores Transport Interface

What WorkflowLogger needs from a destination for encoded records.
"""

from __future__ import annotations

from typing import Protocol


class AsyncTransport(Protocol):
    """
    Asynchronous sink for encoded records.

    send() is awaited once per record, in order; close() is awaited once at
    logger shutdown.
    """

    async def send(self, data: bytes, content_type: str) -> None:
        """
        Deliver one encoded record.

        Args:
            data: Record bytes as produced by an Encoder
            content_type: The encoder's MIME type
        """
        ...

    async def close(self) -> None:
        """Flush and release whatever send() opened."""
        ...
