"""
oishine_backoffice.services.errors

Service-layer error type rendered by the API as `{error, status}`.
"""

from __future__ import annotations

from starlette.status import HTTP_400_BAD_REQUEST


class ServiceError(Exception):
    def __init__(self, message: str, *, status_code: int = HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
