# ereb_monitor/collector/models.py
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ereb_monitor.extractors.models import MetricRecord


class CollectorConfig(BaseModel):
    servers: List[str] = Field(default_factory=list)
    verbose: bool = False
    request_timeout: float = Field(default=30.0, gt=0)
    # applied as aiohttp sock_read: idle limit for each read, headers included
    response_header_timeout: float = Field(default=30.0, gt=0)
    interval: float = Field(default=10.0, gt=0)
    use_ray: bool = False

    @field_validator("servers", mode="before")
    @classmethod
    def split_servers(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [server.strip() for server in value.split(",") if server.strip()]
        return value

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "CollectorConfig":
        """Build a config from EREB_* environment variables."""
        environ = os.environ if environ is None else environ
        env_map = {
            "servers": "EREB_SERVERS",
            "verbose": "EREB_VERBOSE",
            "request_timeout": "EREB_REQUEST_TIMEOUT",
            "response_header_timeout": "EREB_RESPONSE_HEADER_TIMEOUT",
            "interval": "EREB_COLLECT_INTERVAL",
            "use_ray": "EREB_USE_RAY",
        }
        values = {
            field: environ[variable]
            for field, variable in env_map.items()
            if environ.get(variable)
        }
        return cls(**values)


class CycleResult(BaseModel):
    """Outcome of one collection cycle"""

    endpoints: List[str]
    records: List[MetricRecord] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    started_at: datetime
    finished_at: datetime
    duration: float = 0.0

    def records_for(
        self, measurement: Optional[str] = None, hostname: Optional[str] = None
    ) -> List[MetricRecord]:
        records = self.records
        if measurement:
            records = [r for r in records if r.measurement == measurement]
        if hostname:
            records = [r for r in records if r.tags.get("hostname") == hostname]
        return records

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def error_count(self) -> int:
        return len(self.errors)
