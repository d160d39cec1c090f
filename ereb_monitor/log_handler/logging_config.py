# ereb_monitor/log_handler/logging_config.py
import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from typing import Dict, Optional, Union

# Configure logging once per process
_logging_configured = False
_log_listener: Optional[QueueListener] = None

# Loggers switched to DEBUG when the collector runs in verbose mode
VERBOSE_MODULES = ("ereb_monitor.collector", "ereb_monitor.fetcher", "ereb_monitor.extractors")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    verbose: bool = False,
    module_levels: Optional[Dict[str, Union[int, str]]] = None,
) -> QueueListener:
    """
    Central logging configuration for the collector service.

    Records are pushed through a queue so that concurrent collection units
    never block on console or file I/O.

    Args:
        log_level: Base level of the root logger
        log_file: Optional path of a rotating log file
        verbose: Lower the collector, fetcher and extractor loggers to DEBUG
        module_levels: Extra per-logger levels, e.g. {"aiohttp": "WARNING"}

    Returns:
        The running QueueListener
    """
    global _logging_configured, _log_listener

    if _logging_configured and _log_listener is not None:
        return _log_listener

    if log_file and os.path.dirname(log_file):
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)

    handlers = []
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    log_queue = queue.Queue()
    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.addHandler(QueueHandler(log_queue))
    root_logger.setLevel(log_level)

    levels: Dict[str, Union[int, str]] = {}
    if verbose:
        levels.update({name: logging.DEBUG for name in VERBOSE_MODULES})
    if module_levels:
        levels.update(module_levels)
    for module_name, level in levels.items():
        logging.getLogger(module_name).setLevel(level)

    listener.start()

    _logging_configured = True
    _log_listener = listener
    return listener


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, typically called with __name__."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flush and stop the queue listener. Call on service shutdown."""
    global _log_listener, _logging_configured

    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None
        _logging_configured = False
