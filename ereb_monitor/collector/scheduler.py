# ereb_monitor/collector/scheduler.py
import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ereb_monitor.log_handler.logging_config import get_logger
from .coordinator import ErebCollector
from .models import CollectorConfig, CycleResult
from .sink import MetricAccumulator

logger = get_logger(__name__)


class CollectionScheduler:
    """Runs collection cycles on a fixed interval and keeps the latest result."""

    def __init__(
        self,
        config: Optional[CollectorConfig] = None,
        collector: Optional[ErebCollector] = None,
    ):
        self.config = config or CollectorConfig()
        self.collector = collector or ErebCollector(self.config)
        self.last_result: Optional[CycleResult] = None
        self.cycle_count = 0
        self.running = False
        self._loop_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        logger.info("CollectionScheduler initialized")

    def _make_sink(self):
        if self.config.use_ray:
            from ereb_monitor.collector.actors import RayMetricSink

            return RayMetricSink()
        return MetricAccumulator()

    async def run_cycle(self) -> CycleResult:
        """Run one collection cycle now and store its result."""
        sink = self._make_sink()
        started_at = datetime.now(timezone.utc)
        start_time = time.monotonic()

        try:
            await self.collector.gather(sink)
            records = sink.get_records()
            errors = sink.get_error_details()
        finally:
            sink.close()

        result = CycleResult(
            endpoints=self.collector.endpoints(),
            records=records,
            errors=errors,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            duration=time.monotonic() - start_time,
        )

        for error in result.errors:
            logger.warning(f"{error['error_type']}: {error['error_message']}")
        logger.info(
            f"Collection cycle finished in {result.duration:.2f}s: "
            f"{result.record_count} records, {result.error_count} errors"
        )

        self.last_result = result
        self.cycle_count += 1
        return result

    async def start(self) -> None:
        """Start the periodic collection loop."""
        if self.running:
            logger.warning("Collection scheduler already running")
            return

        if self.config.use_ray:
            from ereb_monitor.ray_init import initialize_ray

            initialize_ray()

        self.running = True
        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.create_task(self._collect_loop())
        logger.info(
            f"Collection scheduler started, interval {self.config.interval}s, "
            f"endpoints {self.collector.endpoints()}"
        )

    async def _collect_loop(self) -> None:
        while self.running:
            try:
                await self.run_cycle()
            except Exception as e:
                logger.error(f"Error in collection loop: {str(e)}")

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.config.interval
                )
            except asyncio.TimeoutError:
                pass

    async def stop(self) -> None:
        """Stop after the cycle in progress and release the HTTP session."""
        logger.info("Stopping collection scheduler")
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None
        await self.collector.close()
        logger.info("Collection scheduler stopped")

    def get_stats(self) -> Dict[str, Any]:
        result = self.last_result
        return {
            "running": self.running,
            "cycle_count": self.cycle_count,
            "interval": self.config.interval,
            "endpoints": self.collector.endpoints(),
            "last_cycle_at": result.finished_at if result else None,
            "last_cycle_duration": result.duration if result else None,
            "last_record_count": result.record_count if result else 0,
            "last_error_count": result.error_count if result else 0,
        }
