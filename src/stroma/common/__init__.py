"""
Common utilities shared by the engine, the bridge and the analytics layer.
"""

from stroma.common.timebase import (
    Timebase,
    WallClock,
    MonotonicClock,
    DictatedClock,
)

__all__ = [
    "Timebase",
    "WallClock",
    "MonotonicClock",
    "DictatedClock",
]
