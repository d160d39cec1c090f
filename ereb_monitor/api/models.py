# ereb_monitor/api/models.py
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    error_type: str
    error_message: str
    url: Optional[str] = None
    status: Optional[int] = None
    timestamp: Optional[datetime] = None


class CycleSummaryResponse(BaseModel):
    endpoints: List[str]
    record_count: int
    error_count: int
    started_at: datetime
    finished_at: datetime
    duration: float
    errors: List[ErrorDetail] = Field(default_factory=list)


class SystemStatusResponse(BaseModel):
    running: bool
    cycle_count: int
    interval: float
    endpoints: List[str]
    last_cycle_at: Optional[datetime] = None
    last_cycle_duration: Optional[float] = None
    last_record_count: int = 0
    last_error_count: int = 0
    ray_resources: Dict[str, Any] = Field(default_factory=dict)
