# ereb_monitor/collector/exceptions.py
class CollectorError(Exception):
    """Base exception for collector errors"""
    pass


class CollectorNotFoundError(CollectorError):
    """Raised when no collector is registered under a name"""
    pass
