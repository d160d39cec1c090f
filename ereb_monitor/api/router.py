# ereb_monitor/api/router.py
import logging
from typing import List, Dict, Any, Optional, TYPE_CHECKING

from fastapi import APIRouter, Query, Depends

from .models import CycleSummaryResponse, ErrorDetail, SystemStatusResponse
from .exceptions import CollectionError, SchedulerUnavailableError
from ereb_monitor.collector.models import CycleResult
from ereb_monitor.extractors.models import MetricRecord

# Import for type checking only
if TYPE_CHECKING:
    from ereb_monitor.collector.scheduler import CollectionScheduler

logger = logging.getLogger(__name__)

router = APIRouter()


def get_scheduler():
    from ereb_monitor.main import app_state

    if app_state.scheduler is None:
        raise SchedulerUnavailableError()
    return app_state.scheduler


def summarize(result: CycleResult) -> CycleSummaryResponse:
    return CycleSummaryResponse(
        endpoints=result.endpoints,
        record_count=result.record_count,
        error_count=result.error_count,
        started_at=result.started_at,
        finished_at=result.finished_at,
        duration=result.duration,
        errors=[ErrorDetail(**error) for error in result.errors],
    )


def get_ray_resources(scheduler: "CollectionScheduler") -> Dict[str, Any]:
    if not scheduler.config.use_ray:
        return {}

    import ray

    try:
        if ray.is_initialized():
            return ray.available_resources()
    except Exception as e:
        logger.error(f"Error getting Ray resources: {str(e)}")
    return {}


@router.get("/metrics", response_model=List[MetricRecord])
async def list_metrics(
    measurement: Optional[str] = Query(None, description="Filter by measurement name"),
    hostname: Optional[str] = Query(None, description="Filter by hostname tag"),
    scheduler: "CollectionScheduler" = Depends(get_scheduler),
):
    """
    Metric records of the latest finished collection cycle
    """
    result = scheduler.last_result
    if result is None:
        return []

    return result.records_for(measurement, hostname)


@router.get("/errors", response_model=List[ErrorDetail])
async def list_errors(scheduler: "CollectionScheduler" = Depends(get_scheduler)):
    """
    Errors reported by the latest finished collection cycle
    """
    result = scheduler.last_result
    if result is None:
        return []
    return [ErrorDetail(**error) for error in result.errors]


@router.post("/collect", response_model=CycleSummaryResponse)
async def collect_now(scheduler: "CollectionScheduler" = Depends(get_scheduler)):
    """
    Run a collection cycle immediately
    """
    try:
        result = await scheduler.run_cycle()
    except Exception as e:
        logger.exception("Unexpected error running collection cycle")
        raise CollectionError(f"Failed to run collection cycle: {str(e)}")

    return summarize(result)


@router.get("/system/status", response_model=SystemStatusResponse)
async def get_system_status(scheduler: "CollectionScheduler" = Depends(get_scheduler)):
    """
    Scheduler state and statistics of the latest cycle
    """
    try:
        stats = scheduler.get_stats()
        return SystemStatusResponse(**stats, ray_resources=get_ray_resources(scheduler))
    except Exception as e:
        logger.error(f"Error getting system status: {str(e)}")
        raise CollectionError(f"Failed to get system status: {str(e)}")
