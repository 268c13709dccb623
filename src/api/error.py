"""API error type

Use case errors are raised as ClientError and rendered by the handler
registered in create_app as ``{"error": {"code": ..., "message": ...}}``.
"""

from typing import Optional
from fastapi import status
from libs.result import Error
from src.app.use_cases.errors import ErrorKind, error_kind

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or STATUS_BY_KIND[error_kind(error.code)]

    def to_response(self) -> dict:
        body = {"code": self.error.code, "message": self.error.message}
        if self.error.reason:
            body["reason"] = self.error.reason
        return {"error": body}


def unwrap(result):
    """Value of a successful Result; raise ClientError otherwise"""
    if result.is_err():
        raise ClientError(result.error)
    return result.value
