"""Collection engine for ereb servers.

Fans every configured endpoint out to the status and task extractors, joins
the results and reports per-endpoint failures without aborting the cycle.
"""

from .coordinator import ErebCollector
from .models import CollectorConfig, CycleResult
from .sink import MetricSink, MetricAccumulator
from .scheduler import CollectionScheduler
from .registry import get_collector, register_collector
from .exceptions import CollectorError, CollectorNotFoundError

__all__ = [
    "ErebCollector",
    "CollectorConfig",
    "CycleResult",
    "MetricSink",
    "MetricAccumulator",
    "CollectionScheduler",
    "get_collector",
    "register_collector",
    "CollectorError",
    "CollectorNotFoundError",
]

__version__ = "1.0.0"
