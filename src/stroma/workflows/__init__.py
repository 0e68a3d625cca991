"""Example workflows built on the colored net engine."""

from .file_operations import (
    FileOperations,
    REQUIREMENT_DESCRIPTIONS,
    SEARCH_RESULTS,
    create_file_operations_net,
)
from .task_board import create_task_board_net

__all__ = [
    "FileOperations",
    "REQUIREMENT_DESCRIPTIONS",
    "SEARCH_RESULTS",
    "create_file_operations_net",
    "create_task_board_net",
]
