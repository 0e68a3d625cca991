#!/usr/bin/env python3
"""
Spores Configuration

Workflow logger settings, read from the environment:

    STROMA_LOG_PATH                  directory for the JSONL files
    STROMA_SESSION_TIMEOUT_MINUTES   inactivity before a session closes
    STROMA_LOGGING_ENABLED           "false" turns analytics off
    STROMA_LOG_LEVEL                 debug | info | warn | error
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("~/.stroma-workflow-logs").expanduser()
DEFAULT_SESSION_TIMEOUT_MINUTES = 10
LOG_LEVELS = ("debug", "info", "warn", "error")


@dataclass
class LoggerConfig:
    """
    Configuration for the workflow logger.

    Attributes:
        log_path: Directory holding tool_calls.jsonl and workflow_paths.jsonl
        session_timeout_minutes: Inactivity after which a session is closed
        enabled: Whether anything is recorded at all
        log_level: Verbosity for the analytics CLI's console output
    """
    log_path: Path = field(default=DEFAULT_LOG_PATH)
    session_timeout_minutes: float = DEFAULT_SESSION_TIMEOUT_MINUTES
    enabled: bool = True
    log_level: str = "info"

    def __post_init__(self):
        self.log_path = Path(self.log_path).expanduser()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        if self.session_timeout_minutes <= 0:
            raise ValueError("session_timeout_minutes must be positive")

    @property
    def session_timeout_seconds(self) -> float:
        return self.session_timeout_minutes * 60

    @property
    def logging_level(self) -> int:
        """Equivalent level for the standard logging module"""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warn": logging.WARNING,
            "error": logging.ERROR,
        }[self.log_level]


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> LoggerConfig:
    """
    Build a LoggerConfig from environment variables.

    Unparseable values fall back to their defaults with a warning.

    Args:
        environ: Mapping to read instead of os.environ
    """
    env = os.environ if environ is None else environ

    timeout: float = DEFAULT_SESSION_TIMEOUT_MINUTES
    raw_timeout = env.get("STROMA_SESSION_TIMEOUT_MINUTES")
    if raw_timeout:
        try:
            timeout = int(raw_timeout)
            if timeout <= 0:
                raise ValueError(raw_timeout)
        except ValueError:
            logger.warning("Ignoring invalid STROMA_SESSION_TIMEOUT_MINUTES=%r", raw_timeout)
            timeout = DEFAULT_SESSION_TIMEOUT_MINUTES

    level = env.get("STROMA_LOG_LEVEL", "info").lower()
    if level not in LOG_LEVELS:
        logger.warning("Ignoring invalid STROMA_LOG_LEVEL=%r", level)
        level = "info"

    return LoggerConfig(
        log_path=Path(env.get("STROMA_LOG_PATH") or DEFAULT_LOG_PATH),
        session_timeout_minutes=timeout,
        enabled=env.get("STROMA_LOGGING_ENABLED", "true").lower() != "false",
        log_level=level,
    )


# Global state
_config: Optional[LoggerConfig] = None


def configure(config: Optional[LoggerConfig] = None, **overrides) -> LoggerConfig:
    """
    Set the process-wide logger configuration.

    Starts from config (or the environment when omitted) and applies keyword
    overrides.

    Example:
        ```python
        from stroma import spores

        spores.configure(log_path="/tmp/workflow-logs", session_timeout_minutes=5)
        ```
    """
    global _config

    base = config or config_from_env()
    values = {
        "log_path": base.log_path,
        "session_timeout_minutes": base.session_timeout_minutes,
        "enabled": base.enabled,
        "log_level": base.log_level,
    }
    values.update(overrides)
    _config = LoggerConfig(**values)

    logger.info(f"Workflow logging configured: enabled={_config.enabled}, path={_config.log_path}")
    return _config


def get_config() -> LoggerConfig:
    """Get the current configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = config_from_env()
    return _config
