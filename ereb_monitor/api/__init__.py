# ereb_monitor/api/__init__.py
from .models import CycleSummaryResponse, ErrorDetail, SystemStatusResponse
from .router import router, get_scheduler
from .exceptions import CollectionError, SchedulerUnavailableError

__all__ = [
    'CycleSummaryResponse',
    'ErrorDetail',
    'SystemStatusResponse',
    'router',
    'get_scheduler',
    'CollectionError',
    'SchedulerUnavailableError'
]

__version__ = '1.0.0'
