"""
Core utilities for Grafana organization sync.

Provides configuration management, logging, errors and the bounded worker pool.
"""

from .config import Config
from .logger import setup_logger, LoggerContext
from . import constants
from .errors import (
    SyncError,
    AuthenticationError,
    ParallelFetchError,
    DashboardValidationError,
    ReconcileInterrupted,
    check_interrupted,
)
from .parallel import parallel_map

__all__ = [
    "Config",
    "setup_logger",
    "LoggerContext",
    "constants",
    "SyncError",
    "AuthenticationError",
    "ParallelFetchError",
    "DashboardValidationError",
    "ReconcileInterrupted",
    "check_interrupted",
    "parallel_map",
]
