#!/usr/bin/env python3
"""
Spores Encoder Interface

Protocol for encoding analytics records to bytes.
"""

from __future__ import annotations

from typing import Any, Protocol


class Encoder(Protocol):
    """
    Protocol for encoders that convert analytics records to bytes.

    Records are the dataclasses from spores.models.
    """

    def encode(self, record: Any) -> bytes:
        """
        Encode a record to bytes.

        Args:
            record: The record to encode

        Returns:
            Serialized bytes representation
        """
        ...

    def decode(self, data: bytes) -> dict:
        """Decode bytes produced by encode() back into a plain dict"""
        ...

    def content_type(self) -> str:
        """
        Return the MIME content type for this encoding.

        Returns:
            Content type string (e.g., "application/json")
        """
        ...
