import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ereb_monitor.api import router
from ereb_monitor.collector import CollectionScheduler, CollectorConfig
from ereb_monitor.log_handler.logging_config import setup_logging, get_logger, shutdown_logging


# Initialize centralized logging
log_listener = setup_logging(
    log_file=os.environ.get("EREB_LOG_FILE"),
    verbose=os.environ.get("EREB_VERBOSE", "").lower() in ("1", "true", "yes"),
    module_levels={
        "aiohttp": os.environ.get("AIOHTTP_LOG_LEVEL", "WARNING"),
        "ray": os.environ.get("RAY_LOG_LEVEL", "WARNING"),
    },
)
logger = get_logger(__name__)


class AppState:
    def __init__(self):
        self.scheduler: Optional[CollectionScheduler] = None


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Starts the collection scheduler with the service and stops it on shutdown.
    """
    try:
        logger.info("Starting ereb collector service...")

        config = CollectorConfig.from_env()
        app_state.scheduler = CollectionScheduler(config)
        await app_state.scheduler.start()

        logger.info("Application startup complete")
        yield

        logger.info("Initiating graceful shutdown...")
        await app_state.scheduler.stop()
        app_state.scheduler = None

        if config.use_ray:
            from ereb_monitor.ray_init import shutdown_ray

            shutdown_ray()

        logger.info("Application shutdown complete")
        shutdown_logging()

    except Exception as e:
        logger.error(f"Error during application lifecycle: {str(e)}")
        raise


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application"""
    app = FastAPI(
        title="ereb Metrics Collector",
        description="Polls ereb job-scheduler servers and exposes their status and task metrics",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(router, prefix="/api/v1")

    return app


def run_app():
    """Runs the application with Uvicorn"""
    try:
        app = create_app()

        config = uvicorn.Config(
            app=app,
            host=os.environ.get("EREB_MONITOR_HOST", "0.0.0.0"),
            port=int(os.environ.get("EREB_MONITOR_PORT", "8000")),
            log_level="info",
            timeout_graceful_shutdown=30,
        )
        server = uvicorn.Server(config)
        server.run()
    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        raise


if __name__ == "__main__":
    run_app()
