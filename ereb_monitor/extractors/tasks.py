# ereb_monitor/extractors/tasks.py
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from ereb_monitor.endpoints import host_tag
from ereb_monitor.fetcher.client import ErebHttpClient
from ereb_monitor.log_handler.logging_config import get_logger
from .models import (
    ErebTask,
    ErebTaskList,
    MetricRecord,
    NO_EXIT_CODE,
    TASKS_MEASUREMENT,
)

logger = get_logger(__name__)

# Reported when a task has no history at all, e.g. it is disabled
NEVER_RUN_EXIT_CODE = "-1"

# Base-10 integer text: an optional sign and ASCII digits, nothing else
DECIMAL_INT = re.compile(r"[+-]?[0-9]+")


def parse_int(value: Any) -> Optional[int]:
    if not isinstance(value, str) or not DECIMAL_INT.fullmatch(value):
        return None
    return int(value)


def last_exit_code(exit_codes: Sequence[str]) -> str:
    if not exit_codes:
        return NEVER_RUN_EXIT_CODE
    return exit_codes[-1]


def count_trailing_errors(exit_codes: Sequence[str]) -> int:
    """
    Count failed runs since the last successful one.

    The history is scanned oldest to newest: a nonzero exit code increments
    the counter, a zero exit code resets it. Runs without an exit code
    ("None") and unreadable entries leave the counter untouched.
    """
    errors = 0
    for exit_code in exit_codes:
        if exit_code == NO_EXIT_CODE:
            continue
        code = parse_int(exit_code)
        if code is None:
            continue
        if code == 0:
            errors = 0
        else:
            errors += 1
    return errors


def parse_timeout(value: Any) -> int:
    timeout = parse_int(value)
    return 0 if timeout is None else timeout


def task_fields(task: ErebTask) -> dict:
    exit_codes = task.stats.exit_codes
    return {
        "task_name": task.name,
        "enabled": task.enabled,
        "success_count": task.stats.success,
        "errors_count": task.stats.error,
        "avg_duration": task.stats.duration_avg,
        "max_duration": task.stats.duration_max,
        "min_duration": task.stats.duration_min,
        "timeout": parse_timeout(task.timeout),
        "last_exit_code": last_exit_code(exit_codes),
        "last_errors_count": count_trailing_errors(exit_codes),
    }


async def extract_tasks(client: ErebHttpClient, endpoint: str) -> List[MetricRecord]:
    """
    Fetch ``{endpoint}/tasks`` and build one record per task.

    Either every task of the endpoint is returned or the error propagates;
    partial results are never handed out.
    """
    now = datetime.now(timezone.utc)
    tasks = await client.get_json(f"{endpoint}/tasks", ErebTaskList)
    hostname = host_tag(endpoint)
    logger.debug(f"Got {len(tasks)} tasks from {hostname}")

    records = []
    for task in tasks:
        records.append(
            MetricRecord(
                measurement=TASKS_MEASUREMENT,
                tags={"hostname": hostname, "task_tag": task.name},
                fields=task_fields(task),
                timestamp=now,
            )
        )
    return records
