"""Extractors turning ereb JSON documents into metric records."""

from .models import (
    ErebStatus,
    ErebTask,
    ErebTaskSpec,
    TaskStats,
    MetricRecord,
    STATUS_MEASUREMENT,
    TASKS_MEASUREMENT,
)
from .status import extract_status
from .tasks import (
    extract_tasks,
    count_trailing_errors,
    last_exit_code,
    parse_timeout,
)

__all__ = [
    "ErebStatus",
    "ErebTask",
    "ErebTaskSpec",
    "TaskStats",
    "MetricRecord",
    "STATUS_MEASUREMENT",
    "TASKS_MEASUREMENT",
    "extract_status",
    "extract_tasks",
    "count_trailing_errors",
    "last_exit_code",
    "parse_timeout",
]
