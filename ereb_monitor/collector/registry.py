# ereb_monitor/collector/registry.py
import logging
from typing import Callable, Dict, Optional

from .coordinator import ErebCollector
from .exceptions import CollectorNotFoundError
from .models import CollectorConfig

logger = logging.getLogger(__name__)

CollectorFactory = Callable[..., ErebCollector]

_collectors: Dict[str, CollectorFactory] = {
    ErebCollector.name: ErebCollector,
}


def register_collector(name: str, factory: CollectorFactory) -> None:
    _collectors[name] = factory


def available_collectors() -> list:
    return sorted(_collectors)


def get_collector(name: str, config: Optional[CollectorConfig] = None) -> ErebCollector:
    """Build a fresh collector instance registered under ``name``."""
    factory = _collectors.get(name)
    if not factory:
        logger.error(f"No collector registered under name: {name}")
        raise CollectorNotFoundError(f"No collector found for name: {name}")
    if config is None:
        return factory()
    return factory(config)
