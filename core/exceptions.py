"""
Error taxonomy shared by services and routers.

Every error is an ``HTTPException`` so it reaches the client through
FastAPI's normal error path, with a structured ``detail``::

    {"success": false, "kind": "NotFound", "message": "No video found with id: 7"}
"""
from typing import Dict, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors raised by the engagement core."""

    kind: str = "Error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        self.message = message
        super().__init__(
            status_code=type(self).status_code,
            detail={"success": False, "kind": self.kind, "message": message},
            headers=headers,
        )


class NotFoundError(ServiceError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class UnauthenticatedError(ServiceError):
    kind = "Unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "You need to be logged in to visit this route"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ServiceError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class BadRequestError(ServiceError):
    kind = "BadRequest"
    status_code = status.HTTP_400_BAD_REQUEST
