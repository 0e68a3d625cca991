#!/usr/bin/env python3
"""
Spores DSL Adapters

Adapters that plug workflow recording into the colored net engine.

Usage:
    ```python
    from stroma.spores.dsl import RecordingNet

    net = RecordingNet(create_file_operations_net(), WorkflowLogger())
    ```
"""

from .cpn import RecordingNet

__all__ = ['RecordingNet']
