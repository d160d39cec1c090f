# ereb_monitor/ray_init.py
import ray
from typing import Optional
from ereb_monitor.log_handler.logging_config import get_logger


logger = get_logger(__name__)
_ray_initialized = False


def initialize_ray(address: Optional[str] = None, **kwargs) -> bool:
    """
    Connect to a Ray cluster, or start a local instance, for the actor sink.

    Args:
        address: Optional Ray cluster address to connect to
        **kwargs: Additional parameters to pass to ray.init()

    Returns:
        bool: True if Ray was initialized here, False if it was already running
    """
    global _ray_initialized

    if ray.is_initialized():
        if not _ray_initialized:
            logger.info("Ray was already initialized externally")
        return False

    init_kwargs = {"ignore_reinit_error": True, "include_dashboard": False}
    if address:
        init_kwargs["address"] = address
        logger.info(f"Connecting to Ray cluster at {address}")
    else:
        logger.info("Starting local Ray instance")
    init_kwargs.update(kwargs)

    try:
        ray.init(**init_kwargs)
    except Exception as e:
        logger.error(f"Failed to initialize Ray: {str(e)}")
        raise

    _ray_initialized = True
    logger.info("Ray initialized successfully")
    return True


def shutdown_ray() -> None:
    """Shutdown Ray if it was initialized by this module."""
    global _ray_initialized
    if _ray_initialized and ray.is_initialized():
        try:
            ray.shutdown()
            logger.info("Ray shutdown complete")
        except Exception as e:
            logger.error(f"Error shutting down Ray: {str(e)}")
        finally:
            _ray_initialized = False
