# ereb_monitor/extractors/status.py
from datetime import datetime, timezone

from ereb_monitor.endpoints import host_tag
from ereb_monitor.fetcher.client import ErebHttpClient
from ereb_monitor.log_handler.logging_config import get_logger
from .models import ErebStatus, MetricRecord, STATUS_MEASUREMENT

logger = get_logger(__name__)


async def extract_status(client: ErebHttpClient, endpoint: str) -> MetricRecord:
    """Fetch ``{endpoint}/status`` and turn it into one status record."""
    status = await client.get_json(f"{endpoint}/status", ErebStatus)
    hostname = host_tag(endpoint)

    fields = {
        "running": 1 if status.is_running else 0,
        "tasks_queue_length": len(status.next_tasks),
        "next_run_in": status.next_run,
    }
    logger.debug(f"Status for {hostname}: {fields}")

    return MetricRecord(
        measurement=STATUS_MEASUREMENT,
        tags={"hostname": hostname},
        fields=fields,
        timestamp=datetime.now(timezone.utc),
    )
