#!/usr/bin/env python3
"""
Spores Encoders

Encoders for serializing analytics records.
"""

from .base import Encoder
from .json import JSONEncoder

__all__ = ['Encoder', 'JSONEncoder']
