# ereb_monitor/collector/sink.py
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

from ereb_monitor.extractors.models import MetricRecord


class MetricSink(Protocol):
    """Write side of a metrics pipeline"""

    def add_fields(
        self,
        measurement: str,
        fields: Dict[str, Any],
        tags: Dict[str, str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        ...

    def add_error(self, error: Exception) -> None:
        ...


def error_details(error: Exception) -> Dict[str, Any]:
    """Serializable description of a reported error."""
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "url": getattr(error, "url", None),
        "status": getattr(error, "status", None),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class MetricAccumulator:
    """
    In-process sink. Safe to share between concurrent collection units and
    threads reading results.
    """

    def __init__(self):
        self.records: List[MetricRecord] = []
        self.errors: List[Exception] = []
        self._lock = Lock()

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
        with self._lock:
            self.records.append(record)

    def add_error(self, error: Exception) -> None:
        with self._lock:
            self.errors.append(error)

    def get_records(self, measurement: Optional[str] = None) -> List[MetricRecord]:
        with self._lock:
            records = list(self.records)
        if measurement:
            records = [r for r in records if r.measurement == measurement]
        return records

    def get_error_details(self) -> List[Dict[str, Any]]:
        with self._lock:
            errors = list(self.errors)
        return [error_details(e) for e in errors]

    def close(self) -> None:
        pass
