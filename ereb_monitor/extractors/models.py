# ereb_monitor/extractors/models.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationInfo, field_validator


STATUS_MEASUREMENT = "ereb_status"
TASKS_MEASUREMENT = "ereb_tasks"

NO_EXIT_CODE = "None"


def zero_value(model: type, value: Any, info: ValidationInfo) -> Any:
    """JSON null leaves a field at its default, as a missing key would."""
    if value is None:
        return model.model_fields[info.field_name].default
    return value


class ErebTaskSpec(BaseModel):
    """Task definition as published by an ereb server"""

    task_id: str = ""
    name: str = ""
    cmd: Optional[str] = None
    cron_schedule: Optional[str] = None
    description: Optional[str] = None
    group: Optional[str] = None
    enabled: bool = False
    timeout: str = ""
    try_more_on_error: bool = False
    shell_scripts: List[Any] = Field(default_factory=list)

    @field_validator("task_id", "name", "enabled", "try_more_on_error", mode="before")
    @classmethod
    def null_scalars(cls, value: Any, info: ValidationInfo) -> Any:
        return zero_value(cls, value, info)

    @field_validator("timeout", mode="before")
    @classmethod
    def timeout_as_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("shell_scripts", mode="before")
    @classmethod
    def scripts_default(cls, value: Any) -> List[Any]:
        return value or []


class ErebStatus(BaseModel):
    state: str = ""
    next_run: float = 0.0
    next_tasks: List[ErebTaskSpec] = Field(default_factory=list)
    planned_task_run_uuids: List[str] = Field(default_factory=list)

    @field_validator("state", "next_run", mode="before")
    @classmethod
    def null_scalars(cls, value: Any, info: ValidationInfo) -> Any:
        return zero_value(cls, value, info)

    @field_validator("next_tasks", "planned_task_run_uuids", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> List[Any]:
        return value or []

    @property
    def is_running(self) -> bool:
        return self.state == "running"


class TaskStats(BaseModel):
    task_id: str = ""
    success: int = 0
    error: int = 0
    duration_avg: float = 0.0
    duration_max: int = 0
    duration_min: int = 0
    exit_codes: List[str] = Field(default_factory=list)

    @field_validator(
        "task_id", "success", "error", "duration_avg", "duration_max", "duration_min",
        mode="before",
    )
    @classmethod
    def null_scalars(cls, value: Any, info: ValidationInfo) -> Any:
        return zero_value(cls, value, info)

    @field_validator("exit_codes", mode="before")
    @classmethod
    def exit_codes_as_text(cls, value: Any) -> List[str]:
        """Oldest first; a missing exit code is kept as the text "None"."""
        if not value:
            return []
        return [NO_EXIT_CODE if code is None else str(code) for code in value]


class ErebTask(ErebTaskSpec):
    stats: TaskStats = Field(default_factory=TaskStats)

    @field_validator("stats", mode="before")
    @classmethod
    def stats_default(cls, value: Any) -> Any:
        return value if value is not None else {}


ErebTaskList = TypeAdapter(List[ErebTask])


class MetricRecord(BaseModel):
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, Any]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict form, used when records cross process boundaries"""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricRecord":
        return cls(**data)
