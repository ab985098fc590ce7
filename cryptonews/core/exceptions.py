"""
Domain errors for the CryptoNews API.

Services raise these; the HTTP layer renders them as
``{"success": false, "message": ...}`` with the matching status code.
"""
from typing import Dict, Optional


class AppError(Exception):
    status_code: int = 500
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.message
        self.headers = headers
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    message = "Bad request"


class UnauthorizedError(AppError):
    status_code = 401
    message = "Not authorized to access this route"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = 403
    message = "Not allowed to perform this action"


class NotFoundError(AppError):
    status_code = 404
    message = "Resource not found"
