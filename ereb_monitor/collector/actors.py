# ereb_monitor/collector/actors.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import ray

from ereb_monitor.extractors.models import MetricRecord
from ereb_monitor.log_handler.logging_config import get_logger
from .sink import error_details

logger = get_logger(__name__)


@ray.remote
class MetricSinkActor:
    """Single writer for the records and errors of one collection cycle."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []
        self.errors: List[Dict[str, Any]] = []
        logger.info("Metric sink actor initialized")

    def add_record(self, record: Dict[str, Any]) -> None:
        self.records.append(record)

    def add_error(self, error: Dict[str, Any]) -> None:
        logger.warning(
            f"Collection error from {error.get('url')}: "
            f"{error.get('error_type')}: {error.get('error_message')}"
        )
        self.errors.append(error)

    def get_records(self) -> List[Dict[str, Any]]:
        return list(self.records)

    def get_errors(self) -> List[Dict[str, Any]]:
        return list(self.errors)

    def get_stats(self) -> Dict[str, int]:
        return {"records": len(self.records), "errors": len(self.errors)}


class RayMetricSink:
    """
    Sink that forwards every write to a ``MetricSinkActor``.

    Writes are fire-and-forget messages. Ray runs the calls of one caller on
    one actor in submission order, so reads issued afterwards see every write.
    """

    def __init__(self, actor=None):
        self.actor = actor or MetricSinkActor.remote()

    def add_fields(
        self,
        measurement: str,
        fields: Dict[str, Any],
        tags: Dict[str, str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        record = MetricRecord(
            measurement=measurement,
            fields=dict(fields),
            tags=dict(tags),
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self.actor.add_record.remote(record.to_dict())

    def add_error(self, error: Exception) -> None:
        self.actor.add_error.remote(error_details(error))

    def get_records(self, measurement: Optional[str] = None) -> List[MetricRecord]:
        records = [
            MetricRecord.from_dict(data)
            for data in ray.get(self.actor.get_records.remote())
        ]
        if measurement:
            records = [r for r in records if r.measurement == measurement]
        return records

    def get_error_details(self) -> List[Dict[str, Any]]:
        return ray.get(self.actor.get_errors.remote())

    def close(self) -> None:
        try:
            ray.kill(self.actor)
        except Exception as e:
            logger.error(f"Error stopping metric sink actor: {str(e)}")
