# ereb_monitor/api/exceptions.py
from fastapi import HTTPException
from starlette.status import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)


class CollectionError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class SchedulerUnavailableError(HTTPException):
    def __init__(self, detail: str = "Collection scheduler is not running"):
        super().__init__(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
