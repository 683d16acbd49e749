"""
Core utilities.

Background tasks, stale-response guards and logging setup with no
domain-specific logic.
"""

from .background_task import BackgroundTask, BackgroundTaskManager, call_maybe_async
from .fetch_generation import FetchGeneration
from .log_utils import configure_logging, discover_logs, get_current_log_file_path, get_log_dir

__all__ = [
    "BackgroundTask",
    "BackgroundTaskManager",
    "call_maybe_async",
    "FetchGeneration",
    "configure_logging",
    "discover_logs",
    "get_current_log_file_path",
    "get_log_dir",
]
